import shortuuid


def generate_shortuuid() -> str:
    return shortuuid.uuid()
