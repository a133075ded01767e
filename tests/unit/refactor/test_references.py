from pathlib import Path
from unittest.mock import Mock

import pytest

from typemover.refactor.context import RefactorContext
from typemover.refactor.models import ByteRange, Location
from typemover.refactor.references import ReferenceResolver


@pytest.fixture
def project(workspace_factory):
    return (
        workspace_factory.with_source(
            "src/a.ts",
            """\
            export interface Foo {
              id: string;
            }

            export const make = (): Foo => ({ id: "1" });
            """,
        )
        .with_source(
            "src/b.ts",
            """\
            import { Foo } from "./a";

            export function show(foo: Foo): string {
              return foo.id;
            }
            """,
        )
        .with_source(
            "src/renamed.ts",
            """\
            import { type Foo as Model } from "./a";

            let current: Model | undefined;
            """,
        )
        .with_source(
            "src/unrelated.ts",
            """\
            import { Foo } from "./other";

            let x: Foo;
            """,
        )
        .with_source("src/other.ts", "export interface Foo { name: string }\n")
        .with_source("node_modules/pkg/index.ts", 'import { Foo } from "../../src/a";\n')
        .build()
    )


def _anchor(root: Path) -> int:
    text = (root / "src/a.ts").read_text(encoding="utf-8")
    return text.index("Foo")


def test_find_all_references_across_workspace(project):
    ctx = RefactorContext.create(project)
    resolver = ReferenceResolver(ctx)
    source = project / "src/a.ts"

    locations = resolver.find_all_references(source, _anchor(project))

    by_file = {}
    for location in locations:
        by_file.setdefault(location.path.relative_to(project).as_posix(), []).append(
            (location.line, location.character)
        )
    # Declaring file first: the declaration name and the return type
    assert list(by_file)[0] == "src/a.ts"
    assert by_file["src/a.ts"] == [(0, 17), (4, 24)]
    assert by_file["src/b.ts"] == [(0, 9), (2, 26)]
    assert by_file["src/renamed.ts"] == [(0, 14), (2, 13)]
    assert "src/unrelated.ts" not in by_file
    assert "node_modules/pkg/index.ts" not in by_file


def test_reference_capability_returning_nothing(project):
    finder = Mock()
    finder.find_references.return_value = None
    ctx = RefactorContext.create(project, reference_finder=finder)

    assert ReferenceResolver(ctx).find_all_references(project / "src/a.ts", 0) == []


def test_offset_not_on_identifier_yields_no_references(project):
    ctx = RefactorContext.create(project)

    assert ReferenceResolver(ctx).find_all_references(project / "src/a.ts", 0) == []


def test_existing_import_scan_last_match_wins():
    ctx = RefactorContext.create(Path("/workspace"), reference_finder=Mock())
    text = (
        'import { Foo } from "./first";\n'
        'import { Bar } from "./bar";\n'
        'import type { Foo } from "./second";\n'
    )
    tree = ctx.parser.parse(text)
    resolver = ReferenceResolver(ctx)

    existing = resolver.find_existing_import_path(tree, "Foo")

    assert existing.specifier == "./second"
    assert existing.is_type_only is True
    assert resolver.find_existing_import_path(tree, "Missing").found is False


def test_existing_import_with_inline_type_modifier():
    ctx = RefactorContext.create(Path("/workspace"), reference_finder=Mock())
    tree = ctx.parser.parse('import { Bar, type Foo } from "./models";\n')

    existing = ReferenceResolver(ctx).find_existing_import_path(tree, "Foo")

    assert existing.specifier == "./models"
    assert existing.is_type_only is True


def test_find_import_sites_in_file(project):
    ctx = RefactorContext.create(project)

    sites = ReferenceResolver(ctx).find_import_sites_in_file(project / "src/renamed.ts", "Foo")

    assert len(sites) == 1
    assert (sites[0].line, sites[0].character) == (0, 9)


def test_validate_references_skips_ignored_and_missing(project):
    ctx = RefactorContext.create(project)
    span = ByteRange(0, 3)
    kept_location = Location(project / "src/b.ts", span, 0, 0)
    ignored = Location(project / "node_modules/pkg/index.ts", span, 0, 0)
    missing = Location(project / "src/gone.ts", span, 0, 0)

    kept, skipped = ReferenceResolver(ctx).validate_references(
        [kept_location, ignored, missing]
    )

    assert kept == [kept_location]
    assert skipped == [ignored, missing]


def test_existing_import_keeps_binding_as_written():
    ctx = RefactorContext.create(Path("/workspace"), reference_finder=Mock())
    tree = ctx.parser.parse('import { Bar, type Foo as Model } from "./a";\n')

    existing = ReferenceResolver(ctx).find_existing_import_path(tree, "Foo")

    assert existing.specifier == "./a"
    assert existing.is_type_only is True
    assert existing.binding_text == "Foo as Model"
