from pathlib import Path
from unittest.mock import Mock

import pytest

from typemover.common.transaction import apply_edits
from typemover.refactor.context import RefactorContext
from typemover.refactor.models import ChangeSet, ImportChange
from typemover.refactor.rewriter import ImportRewriter

FILE = Path("/workspace/src/consumer.ts")


@pytest.fixture
def rewriter():
    ctx = RefactorContext.create(Path("/workspace"), reference_finder=Mock())
    return ImportRewriter(ctx)


def _change(
    old="./a", new="./c", name="Foo", type_only=False, declares=False, binding=""
):
    return ImportChange(
        file_path=FILE,
        old_specifier=old,
        new_specifier=new,
        type_name=name,
        is_type_only=type_only,
        declares_type=declares,
        binding_text=binding,
    )


def _rewrite(rewriter, text, change):
    return apply_edits(text, rewriter.plan_edits(change, text))


def test_merges_into_existing_import(rewriter):
    text = 'import { Y } from "./old";\nimport { X } from "./p";\n\nlet y: Y;\n'

    result = _rewrite(rewriter, text, _change(old="./old", new="./p", name="Y"))

    assert result == 'import { X, Y } from "./p";\n\nlet y: Y;\n'


def test_type_only_import_absorbs_regular_move(rewriter):
    text = 'import type { X } from "./p";\n'

    result = _rewrite(rewriter, text, _change(old="", new="./p", name="Y"))

    assert result == 'import type { X, Y } from "./p";\n'


def test_regular_import_becomes_type_only_when_requested(rewriter):
    text = "import { X } from './p'\n"

    result = _rewrite(rewriter, text, _change(old="", new="./p", name="Y", type_only=True))

    assert result == "import type { X, Y } from './p'\n"


def test_sole_binding_import_is_removed(rewriter):
    text = 'import { Foo } from "./a";\n\nconst x: Foo = { id: "1" };\n'

    result = _rewrite(rewriter, text, _change())

    assert result == 'import { Foo } from "./c";\n\nconst x: Foo = { id: "1" };\n'


def test_remaining_bindings_are_sorted(rewriter):
    text = 'import { Zed, Foo, Alpha as A } from "./a";\n'

    result = _rewrite(rewriter, text, _change())

    assert result == (
        'import { Alpha as A, Zed } from "./a";\nimport { Foo } from "./c";\n'
    )


def test_default_binding_survives_removal(rewriter):
    text = "import Default, { Foo } from './a'\nconst value: Foo = Default;\n"

    result = _rewrite(rewriter, text, _change())

    assert result == (
        "import Default from './a'\n"
        "import { Foo } from './c'\n"
        "const value: Foo = Default;\n"
    )


def test_default_import_takes_inline_type_binding(rewriter):
    text = "import Store, { X } from './p';\n"

    result = _rewrite(rewriter, text, _change(old="", new="./p", name="Y", type_only=True))

    assert result == "import Store, { X, type Y } from './p';\n"


def test_aliased_binding_is_carried_to_new_import(rewriter):
    text = 'import { Foo as Model } from "./a";\n\nlet m: Model;\n'

    result = _rewrite(rewriter, text, _change(binding="Foo as Model"))

    assert result == 'import { Foo as Model } from "./c";\n\nlet m: Model;\n'


def test_aliased_binding_is_merged_with_its_alias(rewriter):
    text = (
        'import { Foo as Model, Bar } from "./a";\n'
        'import type { X } from "./c";\n'
    )

    result = _rewrite(rewriter, text, _change(type_only=True, binding="Foo as Model"))

    assert result == (
        'import { Bar } from "./a";\n'
        'import type { Foo as Model, X } from "./c";\n'
    )


def test_last_import_without_trailing_newline(rewriter):
    text = 'import { X } from "./x";\nimport { Foo } from "./a";'

    result = _rewrite(rewriter, text, _change())

    assert result == 'import { X } from "./x";\nimport { Foo } from "./c";'


def test_rewrite_is_idempotent(rewriter):
    text = 'import { Bar, Foo } from "./a";\nimport { Baz } from "./c";\n'
    change = _change()

    once = _rewrite(rewriter, text, change)

    assert once == 'import { Bar } from "./a";\nimport { Baz, Foo } from "./c";\n'
    assert rewriter.plan_edits(change, once) == []


def test_malformed_imports_are_skipped(rewriter):
    text = 'import * as models from "./a";\nimport "./styles.css";\n\nlet m: models.Foo;\n'

    result = _rewrite(rewriter, text, _change())

    assert result == (
        'import * as models from "./a";\n'
        'import "./styles.css";\n'
        'import { Foo } from "./c";\n'
        "\nlet m: models.Foo;\n"
    )


def test_import_added_at_top_without_imports(rewriter):
    text = "export const x: Foo | null = null;\n"

    result = _rewrite(rewriter, text, _change(old="", type_only=True))

    assert result == 'import type { Foo } from "./c";\nexport const x: Foo | null = null;\n'


def test_declaring_file_only_drops_old_import(rewriter):
    text = 'import { Foo } from "./a";\n\nexport interface Foo { id: string }\n'

    result = _rewrite(rewriter, text, _change(new="", declares=True))

    assert result == "\nexport interface Foo { id: string }\n"


def test_same_specifier_is_a_no_op(rewriter):
    text = 'import { Foo } from "./c";\n'

    assert rewriter.plan_edits(_change(old="./c", new="./c"), text) == []


def test_crlf_line_endings_are_kept(rewriter):
    text = 'import { Foo } from "./a";\r\nconst a: Foo = null;\r\n'

    result = _rewrite(rewriter, text, _change())

    assert result == 'import { Foo } from "./c";\r\nconst a: Foo = null;\r\n'


def test_rewrite_submits_one_transaction_per_file(workspace_factory):
    root = (
        workspace_factory.with_source("b.ts", 'import { Foo } from "./a";\n')
        .with_source("d.ts", 'import { Foo } from "./c";\n')
        .build()
    )
    ctx = RefactorContext.create(root)
    change_set = ChangeSet(
        import_changes=(
            ImportChange(root / "b.ts", "./a", "./c", "Foo", False),
            ImportChange(root / "d.ts", "./c", "./c", "Foo", False),
        ),
        moved_declaration_text="export interface Foo {}",
    )

    rewritten = ImportRewriter(ctx).rewrite(change_set)

    assert [c.file_path for c in rewritten] == [root / "b.ts"]
    assert ctx.transactions.preview() == ["[EDIT] b.ts (1 edit(s))"]
    assert (root / "b.ts").read_text(encoding="utf-8") == 'import { Foo } from "./c";\n'
