from confweave.core.config.settings import EngineSettings
from confweave.core.context.context_stack import ContextFrame
from confweave.core.engine import Engine
from confweave.core.errors import ExpansionError
from confweave.core.expand.expander import ExpansionContext, expand
from confweave.core.expand.quit import ExpansionState
from confweave.core.registry.rule_registry import RuleRegistry


def _ctx(reg, settings=None):
    return ExpansionContext(
        registry=reg,
        frame=ContextFrame(),
        state=ExpansionState(quit_token="t"),
        settings=settings or EngineSettings(),
    )


def _mentions(tree, name):
    if isinstance(tree, list):
        return any(_mentions(x, name) for x in tree)
    return tree == name


def test_atoms_and_unknown_forms_pass_through():
    reg = RuleRegistry()
    ctx = _ctx(reg)
    assert expand(42, ctx) == 42
    assert expand("x", ctx) == "x"
    assert expand(["host-op", 1, ["nested", "a"]], ctx) == ["host-op", 1, ["nested", "a"]]
    assert expand([], ctx) == []


def test_rules_inside_host_forms_are_resolved():
    reg = RuleRegistry()
    reg.define(":two", lambda ctx: 2)
    assert expand(["when", "cond", [":two"], [[":two"], 3]], _ctx(reg)) == ["when", "cond", 2, [2, 3]]


def test_quote_is_opaque():
    reg = RuleRegistry()
    reg.define(":two", lambda ctx: 2)
    assert expand(["quote", [":two"]], _ctx(reg)) == ["quote", [":two"]]


def test_replacement_is_expanded_again():
    reg = RuleRegistry()
    reg.define(":outer", lambda ctx, x: ["wrap", [":inner", x]])
    reg.define(":inner", lambda ctx, x: [":leaf", x, x])
    reg.define(":leaf", lambda ctx, a, b: ["pair", a, b])

    assert expand([":outer", 1], _ctx(reg)) == ["wrap", ["pair", 1, 1]]


def test_every_builtin_leaves_no_reference_to_itself():
    engine = Engine.default()
    samples = {
        ":package": ["magit"],
        ":require": ["magit"],
        ":also-load": ["magit-extras"],
        ":load-after": ["dash", "s"],
        ":when-loaded": [["message", "hi"]],
        ":global": ["C-c a", "agenda"],
        ":bind": ["C-c a", "agenda"],
        ":unbind": ["C-c a"],
        ":rebind": ["C-c a", "agenda"],
        ":bind-into": ["org-mode-map", "C-c a", "agenda"],
        ":hook": ["eldoc-mode"],
        ":unhook": ["eldoc-mode"],
        ":hook-into": ["prog-mode"],
        ":local-hook": ["before-save-hook", "fmt"],
        ":option": ["fill-column", 80],
        ":local-set": ["fill-column", 72],
        ":file-match": ["\\.py\\'"],
        ":advise": ["save-buffer", ":before", "fmt"],
        ":unadvise": ["save-buffer", "fmt"],
        ":if-package": ["magit"],
        ":if-feature": ["magit"],
        ":if-function": ["magit-status"],
        ":if-host": ["laptop"],
        ":if-system": ["darwin"],
        ":if-executable": ["git"],
        ":only-if": [True],
        ":quit": [],
        ":with-feature": ["magit"],
        ":with-mode": ["magit-mode"],
        ":with-map": ["magit-mode-map"],
        ":with-hook": ["magit-mode-hook"],
    }
    assert set(samples) == set(engine.registry.names())

    for name, args in samples.items():
        got = engine.setup("demo", [name, *args])
        assert not _mentions(got, name), name


def test_idempotent_on_expanded_tree():
    engine = Engine.default()
    expanded = engine.setup(
        "python",
        [":bind", "C-c C-c", "python-run"],
        [":option", ["append", "python-flags"], "-u"],
        [":if-executable", "python3"],
    )
    assert engine.expand(expanded) == expanded


def test_left_to_right_depth_first():
    reg = RuleRegistry()
    seen: list[str] = []

    def note(ctx, label, *body):
        seen.append(label)
        return ["done", label, *body]

    reg.define(":note", note)
    expand(["seq", [":note", "a", [":note", "a1"]], [":note", "b"]], _ctx(reg))
    assert seen == ["a", "a1", "b"]


def test_self_reintroducing_rule_hits_depth_bound():
    reg = RuleRegistry()
    reg.define(":loop", lambda ctx: ["again", [":loop"]])
    try:
        expand([":loop"], _ctx(reg, EngineSettings(max_depth=20)))
        assert False, "expected ExpansionError"
    except ExpansionError as e:
        assert e.code == "E_EXPANSION_DEPTH"
        assert e.path == ":loop"


def test_depth_counts_nesting_not_siblings():
    reg = RuleRegistry()
    reg.define(":one", lambda ctx: 1)
    ctx = _ctx(reg, EngineSettings(max_depth=1))
    assert expand(["list", *([[":one"]] * 10)], ctx) == ["list", *([1] * 10)]
