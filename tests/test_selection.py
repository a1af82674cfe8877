from bs4 import BeautifulSoup

from gleaner.selection import Selection

MARKUP = (
    '<ul><li class="x y">one</li><li id="second">two</li></ul>'
    "<div><div><p>deep</p></div></div>"
)


def doc():
    return Selection.from_html(MARKUP)


def test_find_returns_matches_in_document_order():
    assert [item.text() for item in doc().find("li")] == ["one", "two"]


def test_len_and_bool():
    assert len(doc().find("li")) == 2
    assert not doc().find("table")
    assert len(doc().find("table")) == 0


def test_text_concatenates_all_nodes():
    assert doc().find("li").text() == "onetwo"


def test_text_of_empty_selection_is_empty():
    assert Selection().text() == ""


def test_first_keeps_only_first_node():
    first = doc().find("li").first()
    assert len(first) == 1
    assert first.text() == "one"


def test_first_of_empty_selection_is_empty():
    assert len(Selection().first()) == 0


def test_attr_joins_multi_valued_attribute():
    assert doc().find("li").attr("class") == "x y"


def test_attr_missing_on_first_node_is_none():
    assert doc().find("li").attr("id") is None
    assert doc().find("#second").attr("id") == "second"


def test_attr_on_empty_selection_is_none():
    assert Selection().attr("id") is None


def test_attr_with_list_valued_parser():
    soup = BeautifulSoup('<a class="b c">link</a>', "html.parser")
    assert Selection([soup]).find("a").attr("class") == "b c"


def test_empty_selector_matches_nothing():
    assert len(doc().find("")) == 0
    assert len(doc().find("   ")) == 0


def test_find_from_several_roots_removes_duplicates():
    divs = doc().find("div")
    assert len(divs) == 2
    paragraphs = divs.find("p")
    assert len(paragraphs) == 1
    assert paragraphs.text() == "deep"


def test_iteration_yields_single_node_selections():
    items = list(doc().find("li"))
    assert [len(item) for item in items] == [1, 1]
    assert items[1].attr("id") == "second"


def test_chained_find_searches_descendants():
    assert len(doc().find("ul").find("li")) == 2
    assert len(doc().find("ul").find("p")) == 0