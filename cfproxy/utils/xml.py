from typing import Any, Optional


def strip_xmlns(obj: Any) -> Any:
    """Strip xmlns attributes from a dict returned by xmltodict.parse."""
    if isinstance(obj, list):
        return [strip_xmlns(item) for item in obj]
    if isinstance(obj, dict):
        obj.pop("@xmlns", None)
        if len(obj) == 1 and "#text" in obj:
            # elide the dict entirely, to match the structure that xmltodict.parse would have
            # returned if the xmlns namespace hadn't been present
            return obj["#text"]
        return {k: strip_xmlns(v) for k, v in obj.items()}
    return obj


def find_first_leaf(obj: Any, tag: str) -> Optional[str]:
    """
    Depth-first search for the text of the first element named ``tag`` in a document returned by
    ``xmltodict.parse``. Elements without text (``<Tag/>``) yield an empty string.

    :param obj: the parsed document (or a sub-tree of it)
    :param tag: the element name to look for
    :return: the text of the first matching element, or None if there is none
    """
    if isinstance(obj, list):
        for item in obj:
            value = find_first_leaf(item, tag)
            if value is not None:
                return value
        return None

    if not isinstance(obj, dict):
        return None

    for key, value in obj.items():
        if key == tag:
            if isinstance(value, list):
                value = value[0] if value else None
            if isinstance(value, dict):
                value = value.get("#text")
            return "" if value is None else str(value)

    for value in obj.values():
        found = find_first_leaf(value, tag)
        if found is not None:
            return found

    return None
