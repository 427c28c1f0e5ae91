import uuid


def new_guid(lowercase: bool = True, hyphens: bool = True) -> str:
    """
    Generate a random (version 4) GUID string.

    :param lowercase: hex digits in lower case (upper case otherwise)
    :param hyphens: 36 character form with hyphens, 32 characters without
    :return: the GUID
    """
    value = uuid.uuid4()
    text = str(value) if hyphens else value.hex
    return text if lowercase else text.upper()
