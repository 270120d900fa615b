"""Import sets for generated code: building, merging, sorting and formatting them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

_NULL_PKG = '"github.com/volatiletech/null/v8"'


@dataclass
class ImportSet:
    """Standard-library imports and third-party imports, kept apart."""

    standard: list[str] = field(default_factory=list)
    third_party: list[str] = field(default_factory=list)

    def format(self) -> str:
        """Render the set as an import declaration; empty when there is nothing to import."""
        imports = [*self.standard, *self.third_party]
        if not imports:
            return ""
        if len(imports) == 1:
            return f"import {imports[0]}"

        lines = ["import ("]
        lines.extend(f"\t{imp}" for imp in self.standard)
        if self.standard and self.third_party:
            lines.append("")
        lines.extend(f"\t{imp}" for imp in self.third_party)
        return "\n".join(lines) + "\n)\n"


@dataclass
class ImportCollection:
    """All the imports used while generating code.

    ``singleton`` and ``test_singleton`` map a file name to its imports;
    ``based_on_type`` maps a column type to the imports it needs.
    """

    all: ImportSet = field(default_factory=ImportSet)
    test: ImportSet = field(default_factory=ImportSet)
    singleton: dict[str, ImportSet] = field(default_factory=dict)
    test_singleton: dict[str, ImportSet] = field(default_factory=dict)
    based_on_type: dict[str, ImportSet] = field(default_factory=dict)


def _string_list(values: Mapping[str, Any], key: str, label: str) -> list[str]:
    if key not in values:
        return []
    items = values[key]
    if not isinstance(items, (list, tuple)):
        raise TypeError(f"import set {label} must be a list")
    for index, item in enumerate(items):
        if not isinstance(item, str):
            raise TypeError(
                f"import set {label} element {index} ({item!r}) must be a string"
            )
    return list(items)


def set_from_interface(value: Any) -> ImportSet:
    """Build an import set from loosely typed configuration data."""
    if not isinstance(value, Mapping):
        raise TypeError("import set should be a mapping")
    return ImportSet(
        standard=_string_list(value, "standard", "standard"),
        third_party=_string_list(value, "third_party", "third party"),
    )


def map_from_interface(value: Any) -> dict[str, ImportSet]:
    """Build a name -> import set map from a mapping or a list of named mappings."""
    if isinstance(value, Mapping):
        entries = list(value.items())
    elif isinstance(value, (list, tuple)):
        entries = []
        for entry in value:
            if not isinstance(entry, Mapping):
                raise TypeError("import map list entries should be mappings")
            name = entry.get("name")
            if not isinstance(name, str):
                raise TypeError("import map list entries need a string 'name'")
            entries.append((name, entry))
    else:
        raise TypeError("import map should be a mapping or a list of mappings")
    return {name: set_from_interface(entry) for name, entry in entries}


def sort_imports(imports: Iterable[str]) -> list[str]:
    """Sort imports by path, ignoring a leading blank-import marker."""
    return sorted(imports, key=lambda imp: imp.lstrip("_ "))


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def new_default_imports() -> ImportCollection:
    """The imports every generated package starts from."""
    return ImportCollection(
        all=ImportSet(
            standard=[
                '"database/sql"',
                '"fmt"',
                '"reflect"',
                '"strings"',
                '"sync"',
                '"time"',
            ],
            third_party=[
                '"github.com/friendsofgo/errors"',
                '"github.com/volatiletech/sqlboiler/v4/boil"',
                '"github.com/volatiletech/sqlboiler/v4/queries"',
                '"github.com/volatiletech/sqlboiler/v4/queries/qm"',
                '"github.com/volatiletech/sqlboiler/v4/queries/qmhelper"',
                '"github.com/volatiletech/strmangle"',
            ],
        ),
        singleton={
            "boil_queries": ImportSet(
                third_party=[
                    '"github.com/volatiletech/sqlboiler/v4/drivers"',
                    '"github.com/volatiletech/sqlboiler/v4/queries"',
                    '"github.com/volatiletech/sqlboiler/v4/queries/qm"',
                ]
            ),
            "boil_types": ImportSet(
                standard=['"strconv"'],
                third_party=[
                    '"github.com/friendsofgo/errors"',
                    '"github.com/volatiletech/sqlboiler/v4/boil"',
                    '"github.com/volatiletech/strmangle"',
                ],
            ),
        },
        test=ImportSet(
            standard=['"bytes"', '"reflect"', '"testing"'],
            third_party=[
                '"github.com/volatiletech/sqlboiler/v4/boil"',
                '"github.com/volatiletech/sqlboiler/v4/queries"',
                '"github.com/volatiletech/randomize"',
                '"github.com/volatiletech/strmangle"',
            ],
        ),
        test_singleton={
            "boil_main_test": ImportSet(
                standard=[
                    '"database/sql"',
                    '"flag"',
                    '"fmt"',
                    '"math/rand"',
                    '"os"',
                    '"path/filepath"',
                    '"strings"',
                    '"testing"',
                    '"time"',
                ],
                third_party=[
                    '"github.com/spf13/viper"',
                    '"github.com/volatiletech/sqlboiler/v4/boil"',
                ],
            ),
            "boil_queries_test": ImportSet(
                standard=[
                    '"bytes"',
                    '"fmt"',
                    '"io"',
                    '"math/rand"',
                    '"regexp"',
                ],
                third_party=['"github.com/volatiletech/sqlboiler/v4/boil"'],
            ),
            "boil_suites_test": ImportSet(standard=['"testing"']),
        },
    )


def nullable_enum_imports() -> ImportCollection:
    """The extra imports needed when nullable enum types are generated."""
    return ImportCollection(
        singleton={
            "boil_types": ImportSet(
                standard=[
                    '"bytes"',
                    '"database/sql/driver"',
                    '"encoding/json"',
                ],
                third_party=[
                    _NULL_PKG,
                    '"github.com/volatiletech/null/v8/convert"',
                ],
            )
        }
    )


def add_type_imports(
    base: ImportSet, type_map: Mapping[str, ImportSet], column_types: Iterable[str]
) -> ImportSet:
    """Return ``base`` plus the imports needed by ``column_types``, de-duplicated and sorted."""
    standard = list(base.standard)
    third_party = list(base.third_party)
    for column_type in column_types:
        extra = type_map.get(column_type)
        if extra is not None:
            standard.extend(extra.standard)
            third_party.extend(extra.third_party)
    return ImportSet(
        standard=sort_imports(_dedupe(standard)),
        third_party=sort_imports(_dedupe(third_party)),
    )


def merge_set(a: ImportSet, b: ImportSet) -> ImportSet:
    """Combine two sets, de-duplicated and sorted."""
    return ImportSet(
        standard=sort_imports(_dedupe([*a.standard, *b.standard])),
        third_party=sort_imports(_dedupe([*a.third_party, *b.third_party])),
    )


def _merge_map(
    a: Mapping[str, ImportSet], b: Mapping[str, ImportSet]
) -> dict[str, ImportSet]:
    merged = dict(a)
    for key, to_merge in b.items():
        merged[key] = merge_set(merged.get(key, ImportSet()), to_merge)
    return merged


def merge(a: ImportCollection, b: ImportCollection) -> ImportCollection:
    """Combine two collections into a new one holding the contents of both."""
    return ImportCollection(
        all=merge_set(a.all, b.all),
        test=merge_set(a.test, b.test),
        singleton=_merge_map(a.singleton, b.singleton),
        test_singleton=_merge_map(a.test_singleton, b.test_singleton),
        based_on_type=_merge_map(a.based_on_type, b.based_on_type),
    )