from __future__ import annotations

from typing import Any

from confweave.core.errors import ExpansionError
from confweave.core.expand.expander import ExpansionContext
from confweave.core.expand.setter import make_setter
from confweave.core.model import Tree
from confweave.core.registry.rule_registry import RuleRegistry


def _second(form: list[Any]) -> str:
    return form[1]


def _key(key: Any) -> Tree:
    if isinstance(key, str):
        return ["kbd", key]
    return key


# Packages and features


def package(ctx: ExpansionContext, name: str) -> Tree:
    """Install package NAME unless it is already installed.

    The archive contents are refreshed first when NAME is not listed in them.
    """
    return [
        "unless",
        ["package-installed-p", name],
        ["unless", ["package-archived-p", name], ["package-refresh-contents"]],
        ["package-install", name],
    ]


def require(ctx: ExpansionContext, feature: str) -> Tree:
    """Load FEATURE; stop the setup if it cannot be loaded."""
    return ["unless", ["require", feature], ctx.quit()]


def also_load(ctx: ExpansionContext, feature: str) -> Tree:
    """Load FEATURE together with the current one."""
    return ["require", feature]


def load_after(ctx: ExpansionContext, *features: str) -> Tree:
    """Load the current feature once every one of FEATURES has loaded."""
    body: Tree = ["require", ctx.get("feature")]
    for feature in reversed(features):
        body = ["after-load", feature, body]
    return body


def when_loaded(ctx: ExpansionContext, *body: Tree) -> Tree:
    """Evaluate BODY after the current feature has loaded."""
    return ["after-load", ctx.get("feature"), *body]


# Keys


def global_key(ctx: ExpansionContext, key: Any, command: Any) -> Tree:
    """Bind KEY to COMMAND globally."""
    return ["global-set-key", _key(key), command]


def bind(ctx: ExpansionContext, key: Any, command: Any) -> Tree:
    """Bind KEY to COMMAND in the current map."""
    return ["define-key", ctx.get("map"), _key(key), command]


def unbind(ctx: ExpansionContext, key: Any) -> Tree:
    """Remove any binding of KEY from the current map."""
    return ["define-key", ctx.get("map"), _key(key), None]


def rebind(ctx: ExpansionContext, key: Any, command: Any) -> Tree:
    """Drop every existing key for COMMAND in the current map, then bind KEY."""
    keymap = ctx.get("map")
    return ["progn", ["unbind-command", keymap, command], ["define-key", keymap, _key(key), command]]


def bind_into(ctx: ExpansionContext, target: str, *bindings: Any) -> Tree:
    """Bind into TARGET, a map or a feature, instead of the current map."""
    if not isinstance(target, str) or not target:
        raise ExpansionError(
            code="E_ILLEGAL_ARGUMENTS",
            message=f"illegal arguments: :bind-into target must be a non-empty string, got {target!r}",
            path=":bind-into",
        )
    if target.endswith(ctx.settings.map_suffix):
        return [":with-map", target, [":bind", *bindings]]
    return [":with-feature", target, [":bind", *bindings]]


# Hooks


def hook(ctx: ExpansionContext, function: Any) -> Tree:
    """Add FUNCTION to the current hook."""
    return ["add-hook", ctx.get("hook"), function]


def unhook(ctx: ExpansionContext, function: Any) -> Tree:
    """Remove FUNCTION from the current hook."""
    return ["remove-hook", ctx.get("hook"), function]


def hook_into(ctx: ExpansionContext, mode: str) -> Tree:
    """Enable the current mode from MODE's hook."""
    return ["add-hook", f"{mode}{ctx.settings.hook_suffix}", ctx.get("mode")]


def local_hook(ctx: ExpansionContext, hook_name: str, function: Any) -> Tree:
    """Add FUNCTION to HOOK buffer-locally, whenever the current hook runs."""
    return ["add-hook", ctx.get("hook"), ["lambda", ["add-hook-local", hook_name, function]]]


# Options


def option(ctx: ExpansionContext, target: Any, value: Tree) -> Tree:
    """Set the user option TARGET to VALUE.

    TARGET is a name, or [append|prepend|remove, name] to edit a list option.
    The option definition is loaded before it is set.
    """

    def reader(name: str) -> Tree:
        return ["option-get", name]

    def writer(name: str, new: Tree) -> Tree:
        return ["progn", ["option-load", name], ["option-set", name, new]]

    return make_setter(target, value, reader, writer)


def local_set(ctx: ExpansionContext, target: Any, value: Tree) -> Tree:
    """Set TARGET to VALUE buffer-locally from the current hook."""
    hook_name = ctx.get("hook")

    def reader(name: str) -> Tree:
        return ["symbol-value", name]

    def writer(name: str, new: Tree) -> Tree:
        return ["add-hook", hook_name, ["lambda", ["setq-local", name, new]]]

    return make_setter(target, value, reader, writer)


def file_match(ctx: ExpansionContext, pattern: str) -> Tree:
    """Enable the current mode for file names matching PATTERN."""
    return ["add-to-list", "auto-mode-alist", ["cons", pattern, ctx.get("mode")]]


# Advice


def advise(ctx: ExpansionContext, symbol: str, how: str, function: Any) -> Tree:
    """Add FUNCTION as HOW advice around SYMBOL."""
    return ["advice-add", symbol, how, function]


def unadvise(ctx: ExpansionContext, symbol: str, function: Any) -> Tree:
    """Remove advice FUNCTION from SYMBOL."""
    return ["advice-remove", symbol, function]


# Conditions. Each stops the rest of the setup when its check fails.


def _stop_unless(ctx: ExpansionContext, condition: Tree) -> Tree:
    return ["unless", condition, ctx.quit()]


def if_package(ctx: ExpansionContext, name: str) -> Tree:
    """Stop unless package NAME is installed."""
    return _stop_unless(ctx, ["package-installed-p", name])


def if_feature(ctx: ExpansionContext, feature: str) -> Tree:
    """Stop unless FEATURE is already loaded."""
    return _stop_unless(ctx, ["featurep", feature])


def if_function(ctx: ExpansionContext, function: str) -> Tree:
    """Stop unless FUNCTION is defined."""
    return _stop_unless(ctx, ["fboundp", function])


def if_host(ctx: ExpansionContext, host: str) -> Tree:
    """Stop unless running on HOST."""
    return _stop_unless(ctx, ["equal", ["system-name"], host])


def if_system(ctx: ExpansionContext, system: str) -> Tree:
    """Stop unless the host system type is SYSTEM."""
    return _stop_unless(ctx, ["equal", ["system-type"], system])


def if_executable(ctx: ExpansionContext, program: str) -> Tree:
    """Stop unless PROGRAM is found on the executable search path."""
    return _stop_unless(ctx, ["executable-find", program])


def only_if(ctx: ExpansionContext, condition: Tree) -> Tree:
    """Stop unless CONDITION evaluates to true."""
    return _stop_unless(ctx, condition)


def quit_setup(ctx: ExpansionContext, value: Any = None) -> Tree:
    """Stop the rest of the setup, returning VALUE."""
    return ctx.quit(value)


def register_builtin_rules(registry: RuleRegistry) -> None:
    registry.define(":package", package, repeatable=True, shorthand=_second, signature="(PACKAGE ...)")
    registry.define(":require", require, repeatable=True, shorthand=_second, signature="(FEATURE ...)")
    registry.define(":also-load", also_load, repeatable=True, signature="(FEATURE ...)")
    registry.define(":load-after", load_after, signature="(FEATURE ...)")
    registry.define(":when-loaded", when_loaded, indent=0, signature="(&rest BODY)")

    registry.define(":global", global_key, repeatable=True, signature="(KEY COMMAND ...)")
    registry.define(":bind", bind, repeatable=True, after_loaded=True, signature="(KEY COMMAND ...)")
    registry.define(":unbind", unbind, repeatable=True, after_loaded=True, signature="(KEY ...)")
    registry.define(":rebind", rebind, repeatable=True, after_loaded=True, signature="(KEY COMMAND ...)")
    registry.define(":bind-into", bind_into, indent=1, signature="(MAP-OR-FEATURE KEY COMMAND ...)")

    registry.define(":hook", hook, repeatable=True, signature="(FUNCTION ...)")
    registry.define(":unhook", unhook, repeatable=True, signature="(FUNCTION ...)")
    registry.define(":hook-into", hook_into, repeatable=True, signature="(MODE ...)")
    registry.define(":local-hook", local_hook, repeatable=True, signature="(HOOK FUNCTION ...)")

    registry.define(":option", option, repeatable=True, signature="(NAME VAL ...)", debug="setup-setter")
    registry.define(":local-set", local_set, repeatable=True, signature="(NAME VAL ...)", debug="setup-setter")
    registry.define(":file-match", file_match, repeatable=True, signature="(PATTERN ...)")

    registry.define(":advise", advise, repeatable=True, signature="(SYMBOL HOW FUNCTION ...)")
    registry.define(":unadvise", unadvise, repeatable=True, signature="(SYMBOL FUNCTION ...)")

    registry.define(":if-package", if_package, repeatable=True, shorthand=_second, signature="(PACKAGE ...)")
    registry.define(":if-feature", if_feature, repeatable=True, signature="(FEATURE ...)")
    registry.define(":if-function", if_function, repeatable=True, signature="(FUNCTION ...)")
    registry.define(":if-host", if_host, repeatable=True, signature="(HOSTNAME ...)")
    registry.define(":if-system", if_system, repeatable=True, signature="(SYSTEM-TYPE ...)")
    registry.define(":if-executable", if_executable, repeatable=True, signature="(PROGRAM ...)")
    registry.define(":only-if", only_if, repeatable=True, signature="(CONDITION ...)")
    registry.define(":quit", quit_setup, signature="(&optional VALUE)")
