import pytest

from boilmodels.importers import (
    ImportCollection,
    ImportSet,
    add_type_imports,
    map_from_interface,
    merge,
    merge_set,
    new_default_imports,
    nullable_enum_imports,
    set_from_interface,
    sort_imports,
)

RAW_SET = {
    "standard": ["hello", "there"],
    "third_party": ["there", "hello"],
}


def test_set_from_interface():
    s = set_from_interface(RAW_SET)
    assert s.standard == ["hello", "there"]
    assert s.third_party == ["there", "hello"]


def test_set_from_interface_missing_keys_gives_empty_lists():
    s = set_from_interface({})
    assert s == ImportSet()


def test_set_from_interface_rejects_non_mapping():
    with pytest.raises(TypeError):
        set_from_interface(["hello"])


def test_set_from_interface_rejects_non_list_standard():
    with pytest.raises(TypeError):
        set_from_interface({"standard": "hello"})


def test_set_from_interface_rejects_non_string_element():
    with pytest.raises(TypeError):
        set_from_interface({"third_party": ["hello", 3]})


def test_map_from_interface():
    mp = map_from_interface({"test_main": RAW_SET})
    assert "test_main" in mp
    assert mp["test_main"].standard == ["hello", "there"]
    assert mp["test_main"].third_party == ["there", "hello"]


def test_map_from_interface_alt_syntax():
    mp = map_from_interface([{"name": "test_main", **RAW_SET}])
    assert list(mp) == ["test_main"]
    assert mp["test_main"].standard == ["hello", "there"]
    assert mp["test_main"].third_party == ["there", "hello"]


def test_map_from_interface_rejects_other_types():
    with pytest.raises(TypeError):
        map_from_interface(42)


def test_map_from_interface_list_entry_needs_name():
    with pytest.raises(TypeError):
        map_from_interface([{"standard": ["x"]}])


def test_imports_sort():
    a1 = ['"fmt"', '"errors"']
    a2 = [
        '_ "github.com/lib/pq"',
        '_ "github.com/gorilla/n"',
        '"github.com/gorilla/mux"',
        '"github.com/gorilla/websocket"',
    ]
    assert sort_imports(a1) == ['"errors"', '"fmt"']
    assert sort_imports(a2) == [
        '"github.com/gorilla/mux"',
        '_ "github.com/gorilla/n"',
        '"github.com/gorilla/websocket"',
        '_ "github.com/lib/pq"',
    ]


def test_add_type_imports():
    imports1 = ImportSet(
        standard=['"errors"', '"fmt"'],
        third_party=['"github.com/volatiletech/sqlboiler/v4/boil"'],
    )
    expected = ImportSet(
        standard=['"errors"', '"fmt"', '"time"'],
        third_party=[
            '"github.com/volatiletech/null/v8"',
            '"github.com/volatiletech/sqlboiler/v4/boil"',
        ],
    )
    types = ["null.Time", "null.Time", "time.Time"]

    imps = new_default_imports()
    imps.based_on_type = {
        "null.Time": ImportSet(third_party=['"github.com/volatiletech/null/v8"']),
        "time.Time": ImportSet(standard=['"time"']),
    }

    assert add_type_imports(imports1, imps.based_on_type, types) == expected

    imports2 = ImportSet(
        standard=['"errors"', '"fmt"', '"time"'],
        third_party=[
            '"github.com/volatiletech/null/v8"',
            '"github.com/volatiletech/sqlboiler/v4/boil"',
        ],
    )
    assert add_type_imports(imports2, imps.based_on_type, types) == expected


def test_add_type_imports_does_not_mutate_base():
    base = ImportSet(standard=['"fmt"'])
    add_type_imports(base, {"time.Time": ImportSet(standard=['"time"'])}, ["time.Time"])
    assert base.standard == ['"fmt"']


def test_merge_set():
    a = ImportSet(
        standard=["fmt"],
        third_party=["github.com/volatiletech/sqlboiler/v4", "github.com/volatiletech/null/v8"],
    )
    b = ImportSet(standard=["os"], third_party=["github.com/volatiletech/sqlboiler/v4"])
    c = merge_set(a, b)
    assert c.standard == ["fmt", "os"]
    assert c.third_party == [
        "github.com/volatiletech/null/v8",
        "github.com/volatiletech/sqlboiler/v4",
    ]


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ([], [], []),
        (["1", "2"], [], ["1", "2"]),
        ([], ["1", "2"], ["1", "2"]),
        (["1", "2"], ["3", "4"], ["1", "2", "3", "4"]),
    ],
)
def test_merge_set_combines_lists(a, b, expected):
    c = merge_set(ImportSet(standard=a), ImportSet(standard=b))
    assert c.standard == expected


def test_merge():
    a = ImportCollection(
        all=ImportSet(["aa"], ["aa"]),
        test=ImportSet(["at"], ["at"]),
        singleton={"a": ImportSet(["as"], ["as"]), "c": ImportSet(["as"], ["as"])},
        test_singleton={"a": ImportSet(["at"], ["at"]), "c": ImportSet(["at"], ["at"])},
        based_on_type={"a": ImportSet(["abot"], ["abot"]), "c": ImportSet(["abot"], ["abot"])},
    )
    b = ImportCollection(
        all=ImportSet(["bb"], ["bb"]),
        test=ImportSet(["bt"], ["bt"]),
        singleton={"b": ImportSet(["bs"], ["bs"]), "c": ImportSet(["bs"], ["bs"])},
        test_singleton={"b": ImportSet(["bt"], ["bt"]), "c": ImportSet(["bt"], ["bt"])},
        based_on_type={"b": ImportSet(["bbot"], ["bbot"]), "c": ImportSet(["bbot"], ["bbot"])},
    )

    c = merge(a, b)

    def has(s, first, second):
        assert s.standard == [first, second]
        assert s.third_party == [first, second]

    has(c.all, "aa", "bb")
    has(c.test, "at", "bt")
    has(c.singleton["c"], "as", "bs")
    has(c.test_singleton["c"], "at", "bt")
    has(c.based_on_type["c"], "abot", "bbot")
    assert set(c.singleton) == {"a", "b", "c"}


def test_set_format():
    s = ImportSet(standard=['"fmt"'], third_party=['"github.com/friendsofgo/errors"'])
    expected = 'import (\n\t"fmt"\n\n\t"github.com/friendsofgo/errors"\n)'
    assert s.format().strip() == expected


def test_set_format_single_and_empty():
    assert ImportSet().format() == ""
    assert ImportSet(third_party=['"fmt"']).format() == 'import "fmt"'


def test_default_and_enum_imports():
    defaults = new_default_imports()
    assert set(defaults.singleton) == {"boil_queries", "boil_types"}
    assert '"testing"' in defaults.test_singleton["boil_suites_test"].standard
    enums = nullable_enum_imports()
    assert '"encoding/json"' in enums.singleton["boil_types"].standard