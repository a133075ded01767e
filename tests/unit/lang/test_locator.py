from pathlib import Path

import pytest

from typemover.lang.typescript.locator import TypeLocator
from typemover.lang.typescript.parser import NodeKind, TreeSitterParser
from typemover.refactor.errors import NameConflictError

SOURCE = """\
import { Base } from "./base";

export interface Foo extends Base {
  id: string;
}

function build() {
  type Local = { ok: boolean };
  return null;
}

export type Alias = Foo | null;
"""


@pytest.fixture
def locator():
    return TypeLocator(TreeSitterParser())


def _text(span):
    return SOURCE.encode("utf-8")[span.start : span.end].decode("utf-8")


def test_find_by_name(locator):
    info = locator.find_by_name(SOURCE, "Foo")

    assert info.name == "Foo"
    assert info.kind is NodeKind.INTERFACE
    assert _text(info.declaration_span).startswith("export interface Foo")
    assert _text(info.name_span) == "Foo"
    assert info.dependencies == ("Base",)


def test_find_by_name_missing(locator):
    assert locator.find_by_name(SOURCE, "Missing") is None


def test_find_at_position_on_export_keyword(locator):
    info = locator.find_at_position(SOURCE, SOURCE.index("export interface"))

    assert info.name == "Foo"


def test_find_at_position_inside_body(locator):
    info = locator.find_at_position(SOURCE, SOURCE.index("id: string"))

    assert info.name == "Foo"


def test_find_at_position_in_function_body(locator):
    info = locator.find_at_position(SOURCE, SOURCE.index("ok: boolean"))

    assert info.name == "Local"
    assert info.kind is NodeKind.TYPE_ALIAS


def test_find_at_position_outside_declarations(locator):
    assert locator.find_at_position(SOURCE, SOURCE.index("return null")) is None


def test_validate_destination_free(locator):
    destination = "export interface Other {}\nfunction f() { type Foo = string; }\n"

    locator.validate_destination_free("Foo", destination, Path("dest.ts"))

    with pytest.raises(NameConflictError, match="already exists in destination file dest.ts"):
        locator.validate_destination_free("Other", destination, Path("dest.ts"))
