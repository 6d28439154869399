from matcount.models.material import Material
from matcount.models.client import Client
from matcount.models.inventory import InventoryLedger, StockHistory
from matcount.models.client_transaction import ClientTransaction
from matcount.models.costing import CostingSnapshot
