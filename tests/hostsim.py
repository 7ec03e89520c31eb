"""Minimal host used by the tests to run expanded forms.

Only covers the host vocabulary emitted by the built-in rules. Strings are
literal values; names are passed to host operations as strings.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable


class Throw(Exception):
    def __init__(self, tag: Any, value: Any) -> None:
        super().__init__(tag)
        self.tag = tag
        self.value = value


class Host:
    def __init__(
        self,
        *,
        loaded: tuple[str, ...] = (),
        available: tuple[str, ...] = (),
        packages: tuple[str, ...] = (),
        archived: tuple[str, ...] = (),
        executables: tuple[str, ...] = (),
        functions: tuple[str, ...] = (),
        options: dict[str, Any] | None = None,
        system_name: str = "localhost",
        system_type: str = "gnu/linux",
    ) -> None:
        self.loaded: set[str] = set(loaded)
        self.available: set[str] = set(available) | set(loaded)
        self.packages: set[str] = set(packages)
        self.archived: set[str] = set(archived)
        self.refreshed = False
        self.executables: set[str] = set(executables)
        self.functions: set[str] = set(functions)
        self.options: dict[str, Any] = dict(options or {})
        self.system_name = system_name
        self.system_type = system_type

        self.loaded_options: list[str] = []
        self.variables: dict[str, Any] = {}
        self.global_keys: dict[str, Any] = {}
        self.keymaps: dict[str, dict[str, Any]] = defaultdict(dict)
        self.hooks: dict[str, list[Any]] = defaultdict(list)
        self.local_hooks: dict[str, list[Any]] = defaultdict(list)
        self.advice: dict[str, list[tuple[str, Any]]] = defaultdict(list)
        self.lists: dict[str, list[Any]] = defaultdict(list)
        self.pending: dict[str, list[Callable[[], None]]] = defaultdict(list)
        self.trace: list[tuple[Any, ...]] = []

    def run(self, form: Any) -> Any:
        return self.eval(form, {})

    def load(self, feature: str) -> None:
        if feature in self.loaded:
            return
        self.loaded.add(feature)
        self.available.add(feature)
        for thunk in self.pending.pop(feature, []):
            thunk()

    def run_hook(self, hook: str) -> None:
        for fn in list(self.hooks.get(hook, [])):
            if callable(fn):
                fn()
            else:
                self.trace.append(("call", fn))

    def eval(self, form: Any, env: dict[str, Any]) -> Any:
        if not isinstance(form, list) or not form or not isinstance(form[0], str):
            return form

        head, args = form[0], form[1:]
        special = getattr(self, "_sf_" + head.replace("-", "_"), None)
        if special is not None:
            return special(args, env)

        values = [self.eval(a, env) for a in args]
        fn = getattr(self, "_fn_" + head.replace("-", "_"), None)
        if fn is None:
            raise AssertionError(f"host has no operation {head!r}")
        return fn(*values)

    def _body(self, forms: list[Any], env: dict[str, Any]) -> Any:
        result = None
        for f in forms:
            result = self.eval(f, env)
        return result

    # Special forms

    def _sf_quote(self, args, env):
        return args[0]

    def _sf_progn(self, args, env):
        return self._body(args, env)

    def _sf_if(self, args, env):
        if self.eval(args[0], env):
            return self.eval(args[1], env)
        return self._body(args[2:], env)

    def _sf_when(self, args, env):
        if self.eval(args[0], env):
            return self._body(args[1:], env)
        return None

    def _sf_unless(self, args, env):
        if not self.eval(args[0], env):
            return self._body(args[1:], env)
        return None

    def _sf_let(self, args, env):
        inner = dict(env)
        for name, expr in args[0]:
            inner[name] = self.eval(expr, env)
        return self._body(args[1:], inner)

    def _sf_var(self, args, env):
        return env[args[0]]

    def _sf_catch(self, args, env):
        tag = self.eval(args[0], env)
        try:
            return self._body(args[1:], env)
        except Throw as t:
            if t.tag != tag:
                raise
            return t.value

    def _sf_throw(self, args, env):
        raise Throw(self.eval(args[0], env), self.eval(args[1], env))

    def _sf_lambda(self, args, env):
        captured = dict(env)
        return lambda: self._body(args, captured)

    def _sf_after_load(self, args, env):
        feature = self.eval(args[0], env)
        captured = dict(env)

        def thunk() -> None:
            self._body(args[1:], captured)

        if feature in self.loaded:
            thunk()
        else:
            self.pending[feature].append(thunk)
        return None

    # Functions

    def _fn_not(self, x):
        return not x

    def _fn_equal(self, a, b):
        return a == b

    def _fn_list(self, *xs):
        return list(xs)

    def _fn_cons(self, x, rest):
        if rest is None:
            return [x]
        if isinstance(rest, list):
            return [x, *rest]
        return [x, rest]

    def _fn_append(self, a, b):
        return [*(a or []), *(b or [])]

    def _fn_member(self, x, lst):
        return x in (lst or [])

    def _fn_remove(self, x, lst):
        return [e for e in (lst or []) if e != x]

    def _fn_kbd(self, key):
        return key

    def _fn_global_set_key(self, key, command):
        self.trace.append(("global-set-key", key, command))
        self.global_keys[key] = command

    def _fn_define_key(self, keymap, key, command):
        self.trace.append(("define-key", keymap, key, command))
        if command is None:
            self.keymaps[keymap].pop(key, None)
        else:
            self.keymaps[keymap][key] = command

    def _fn_unbind_command(self, keymap, command):
        for key in [k for k, v in self.keymaps[keymap].items() if v == command]:
            del self.keymaps[keymap][key]

    def _fn_add_hook(self, hook, fn):
        self.trace.append(("add-hook", hook, fn))
        if fn not in self.hooks[hook]:
            self.hooks[hook].append(fn)

    def _fn_remove_hook(self, hook, fn):
        self.trace.append(("remove-hook", hook, fn))
        if fn in self.hooks[hook]:
            self.hooks[hook].remove(fn)

    def _fn_add_hook_local(self, hook, fn):
        self.local_hooks[hook].append(fn)

    def _fn_option_load(self, name):
        self.loaded_options.append(name)

    def _fn_option_get(self, name):
        return self.options.get(name)

    def _fn_option_set(self, name, value):
        self.trace.append(("option-set", name, value))
        self.options[name] = value

    def _fn_symbol_value(self, name):
        return self.variables.get(name)

    def _fn_setq_local(self, name, value):
        self.variables[name] = value

    def _fn_add_to_list(self, name, element):
        if element not in self.lists[name]:
            self.lists[name].insert(0, element)

    def _fn_package_installed_p(self, name):
        return name in self.packages

    def _fn_package_archived_p(self, name):
        return name in self.archived

    def _fn_package_refresh_contents(self):
        self.trace.append(("package-refresh-contents",))
        self.refreshed = True

    def _fn_package_install(self, name):
        self.trace.append(("package-install", name))
        self.packages.add(name)

    def _fn_featurep(self, feature):
        return feature in self.loaded

    def _fn_require(self, feature):
        if feature not in self.available:
            return False
        self.trace.append(("require", feature))
        self.load(feature)
        return True

    def _fn_executable_find(self, program):
        return f"/usr/bin/{program}" if program in self.executables else None

    def _fn_fboundp(self, name):
        return name in self.functions

    def _fn_system_name(self):
        return self.system_name

    def _fn_system_type(self):
        return self.system_type

    def _fn_advice_add(self, symbol, how, fn):
        self.advice[symbol].append((how, fn))

    def _fn_advice_remove(self, symbol, fn):
        self.advice[symbol] = [(h, f) for h, f in self.advice[symbol] if f != fn]
