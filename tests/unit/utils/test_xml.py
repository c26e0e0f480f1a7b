import xmltodict

from cfproxy.utils.xml import find_first_leaf, strip_xmlns


def test_strip_xmlns():
    document = xmltodict.parse(
        '<ListStacksResponse xmlns="http://cloudformation.amazonaws.com/doc/2010-05-15/">'
        "<RequestId>abc</RequestId></ListStacksResponse>"
    )

    assert strip_xmlns(document) == {"ListStacksResponse": {"RequestId": "abc"}}


def test_strip_xmlns_of_text_element():
    document = xmltodict.parse('<StackStatus xmlns="urn:x">CREATE_COMPLETE</StackStatus>')

    assert strip_xmlns(document) == {"StackStatus": "CREATE_COMPLETE"}


def test_find_first_leaf_depth_first():
    document = {
        "a": {
            "b": [{"c": {"Tag": "first"}}, {"Tag": "second"}],
            "Other": {"Tag": "third"},
        }
    }

    assert find_first_leaf(document, "Tag") == "first"


def test_find_first_leaf_prefers_direct_child():
    assert find_first_leaf({"Tag": "direct", "nested": {"Tag": "nested"}}, "Tag") == "direct"


def test_find_first_leaf_missing():
    assert find_first_leaf({"a": {"b": "c"}}, "Tag") is None
    assert find_first_leaf(None, "Tag") is None


def test_find_first_leaf_text_and_attributes():
    document = xmltodict.parse('<a><Tag attr="1">value</Tag></a>')

    assert find_first_leaf(document, "Tag") == "value"
    assert find_first_leaf(xmltodict.parse("<a><Tag/></a>"), "Tag") == ""
    assert find_first_leaf(xmltodict.parse("<a><Tag>1</Tag><Tag>2</Tag></a>"), "Tag") == "1"
