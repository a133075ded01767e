import pytest

from typemover.lang.typescript.imports import iter_imports, render_import
from typemover.lang.typescript.parser import TreeSitterParser


@pytest.fixture
def parser():
    return TreeSitterParser()


def _imports(parser, source):
    return list(iter_imports(parser.parse(source)))


def test_named_import_details(parser):
    (decl,) = _imports(parser, "import Default, { Foo as Bar, type Baz } from './a'\n")

    assert decl.specifier == "./a"
    assert decl.quote == "'"
    assert decl.has_semicolon is False
    assert decl.is_type_only is False
    assert decl.default_binding == "Default"
    assert [b.name for b in decl.bindings] == ["Foo", "Baz"]

    foo = decl.binding_for("Foo")
    assert foo.local_name == "Bar"
    assert foo.text == "Foo as Bar"
    assert foo.is_type_only is False

    baz = decl.binding_for("Baz")
    assert baz.is_type_only is True
    assert baz.render(inside_type_only_import=True) == "Baz"
    assert baz.render(inside_type_only_import=False) == "type Baz"

    # Matching is on the imported name, not the local alias
    assert decl.binding_for("Bar") is None


def test_type_only_import(parser):
    (decl,) = _imports(parser, 'import type { Foo } from "@/models";')

    assert decl.is_type_only is True
    assert decl.has_semicolon is True
    assert decl.specifier == "@/models"


def test_imports_without_named_list_cannot_be_amended(parser):
    source = (
        'import "./side-effect";\n'
        'import * as ns from "./ns";\n'
        'import Default from "./default";\n'
    )
    decls = _imports(parser, source)

    assert [d.specifier for d in decls] == ["./side-effect", "./ns", "./default"]
    assert all(not d.has_named_bindings for d in decls)
    assert decls[2].default_binding == "Default"


def test_only_top_level_imports_are_listed(parser):
    source = 'import { A } from "./a";\nconst lazy = () => import("./b");\n'

    assert [d.specifier for d in _imports(parser, source)] == ["./a"]


def test_render_import_variants():
    assert render_import(["A", "B"], "./x") == 'import { A, B } from "./x";'
    assert (
        render_import(["A"], "./x", type_only=True, quote="'", semicolon=False)
        == "import type { A } from './x'"
    )
    assert (
        render_import(["A"], "./x", default_binding="D")
        == 'import D, { A } from "./x";'
    )
