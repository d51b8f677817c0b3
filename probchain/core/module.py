from typing import Callable, Optional, Dict, Any, get_type_hints, Type, ClassVar, Mapping
from types import MappingProxyType
from dataclasses import dataclass
import functools
import inspect
import logging
import numbers

from prefect import flow, task


__all__ = [
    "Module",
    "InputSpec",
]

logger = logging.getLogger(__name__)

_MISSING = object()

# Plain annotations are widened so that numpy scalars and ints pass where
# a float is annotated.
_WIDEN = {float: numbers.Real, int: numbers.Integral}


@dataclass
class InputSpec:
    """Specification for a module input.

    Describes the expected type, requirement status, and default value for
    an input to a :class:`Module`. Used by :meth:`Module.set_input` and
    checked every time a registered run function is called.

    Attributes:
        type: Expected type (anything usable with ``isinstance``, including
            ``numbers.Real`` or ``collections.abc.Callable``); ``None`` skips
            the check.
        required: Whether this input must be explicitly provided.
        default: Default value; `_MISSING` indicates no default provided.
    """
    type: Optional[Any] = None
    required: bool = False
    default: Any = _MISSING


class Module(object):
    """Base class for all probchain modules.

    Provides dependency injection, input specification, type validation, and
    integration with Prefect tasks and flows. Each subclass wraps a sampler
    or posterior computation that can depend on other modules and be
    composed into larger Prefect workflows.

    Typical usage:
        1. Subclass :class:`Module` and declare required dependencies via
           the class variable :pyattr:`DEPENDENCIES`.
        2. Define inputs using :meth:`set_input`.
        3. Register computational functions using :meth:`run_func`.
        4. Call registered functions as Prefect tasks or flows, or call the
           undecorated function through the Prefect object's ``.fn``.

    Attributes:
        DEPENDENCIES: Mapping of dependency name to required Module subclass.
        dependencies: Injected dependency instances.
        inputs: Declared input specifications.
        _run_funcs: Registered Prefect tasks/flows by name.
    """

    DEPENDENCIES: ClassVar[Mapping[str, Type['Module']]] = MappingProxyType({})

    def __init__(self, **dependencies: 'Module'):
        """Initializes the module and validates dependencies.

        Args:
            **dependencies: Dependency modules to inject into this module.

        Raises:
            RuntimeError: If required dependencies are missing or unexpected ones are provided.
            TypeError: If a dependency is not an instance of its declared Module subclass.
        """
        missing = [name for name in self.DEPENDENCIES if name not in dependencies]
        if missing:
            raise RuntimeError(f"Missing required dependencies: {missing}")

        unexpected = [name for name in dependencies if name not in self.DEPENDENCIES]
        if unexpected:
            raise RuntimeError(f"Unexpected dependencies provided: {unexpected}")

        for name, dep_instance in dependencies.items():
            expected = self.DEPENDENCIES[name]
            if not isinstance(dep_instance, Module):
                raise TypeError(f"Dependency '{name}' must be Module subclass instance; got {type(dep_instance)}")
            if not isinstance(dep_instance, expected):
                raise TypeError(
                    f"Dependency '{name}' must be an instance of {expected.__name__}; "
                    f"got {type(dep_instance).__name__}"
                )

        self.dependencies: Dict[str, Module] = dict(dependencies)
        self.inputs: Dict[str, Dict[str, Any]] = {}
        self._run_funcs: Dict[str, Callable] = {}

        # Per-run-function input specification (built from signature, overridden by set_input)
        self._inputs_for_run: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def set_input(self, **input_defaults):
        """Defines input specifications for the module.

        Each keyword argument specifies either an :class:`InputSpec`
        (for type and requirement) or a simple default value. Specs declared
        here take precedence over what is inferred from a run function's
        signature.

        Example:
            >>> self.set_input(num_samples=InputSpec(type=numbers.Integral, required=True), proposal_std=1.0)

        Args:
            **input_defaults: Key–value pairs of input names and their specifications.
        """
        for key, spec in input_defaults.items():
            if isinstance(spec, InputSpec):
                self.inputs[key] = {
                    'type': spec.type,
                    'required': spec.required,
                    'default': spec.default,
                }
            else:
                self.inputs[key] = {
                    'type': None,
                    'required': False,
                    'default': spec,
                }

    def run_func(
            self,
            f: Callable,
            *,
            name: Optional[str] = None,
            as_task: bool = True,
            ) -> Callable:
        """Registers a computational function as a Prefect task or flow.

        Registered functions become callable attributes of the module
        (e.g., ``module.sample_posterior(...)``). Every call:

            1. Binds arguments against the function signature.
            2. Fills defaults and rejects missing or unknown inputs.
            3. Checks input types.
            4. Injects dependencies by parameter name.

        Args:
            f: Function implementing the computation.
            name: Custom function name override.
                Defaults to the original function name.
            as_task: Whether to register the function as a Prefect task
                (``True``) or flow (``False``). Defaults to ``True``.

        Returns:
            Callable: The decorated Prefect task or flow.

        Raises:
            RuntimeError: If a run function with the same name is already registered.
        """
        run_name = name or f.__name__
        sig = inspect.signature(f)

        if run_name in self._run_funcs:
            raise RuntimeError(f"Run function '{run_name}' already registered")

        self._inputs_for_run[run_name] = self._infer_inputs(f, sig)

        # Prefect binds call arguments against the signature it sees and may
        # pass them positionally, so injected dependencies are hidden from it
        # and from the binding below.
        call_sig = sig.replace(parameters=[
            p for pname, p in sig.parameters.items() if pname not in self.dependencies
        ])

        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            self._ensure_dependencies_available()

            bound = call_sig.bind_partial(*args, **kwargs)
            user_kwargs = self._ensure_inputs_satisfied(dict(bound.arguments), run_name=run_name, sig=sig)
            self._type_check(user_kwargs, run_name=run_name)

            # dependencies go in after validation so they are not treated as unknown inputs
            dep_kwargs = {k: v for k, v in self.dependencies.items() if k in sig.parameters}

            logger.debug("%s.%s called with inputs %s", type(self).__name__, run_name, sorted(user_kwargs))
            return f(**dep_kwargs, **user_kwargs)

        wrapper.__signature__ = call_sig

        if as_task:
            pf = task(name=run_name)(wrapper)
        else:
            pf = flow(name=run_name, validate_parameters=False)(wrapper)

        self._run_funcs[run_name] = pf
        setattr(self, run_name, pf)
        return pf

    # ------------------------------ validation ------------------------------

    def _infer_inputs(self, f: Callable, sig: inspect.Signature) -> Dict[str, Dict[str, Any]]:
        """Infers input specifications from a function's signature and type hints.

        Dependencies are excluded; they are injected by name at call time.
        """
        hints = get_type_hints(f)
        specs: Dict[str, Dict[str, Any]] = {}
        for pname, param in sig.parameters.items():
            if pname == "self" or pname in self.dependencies:
                continue
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue
            has_default = param.default is not inspect.Parameter.empty
            ann = hints.get(pname)
            ptype = _WIDEN.get(ann, ann) if isinstance(ann, type) else None
            specs[pname] = {
                'type': ptype,
                'required': not has_default,
                'default': param.default if has_default else _MISSING,
            }

        for key, meta in self.inputs.items():
            if key in specs:
                specs[key] = dict(meta)
        return specs

    def _ensure_dependencies_available(self):
        missing = [k for k in self.DEPENDENCIES if k not in self.dependencies]
        if missing:
            raise RuntimeError(
                f"Missing required dependencies at runtime: {missing}. Available: {list(self.dependencies.keys())}"
            )

    def _ensure_inputs_satisfied(self, kwargs: Dict[str, Any], *, run_name: str,
                                 sig: inspect.Signature) -> Dict[str, Any]:
        """Validates provided inputs and fills missing defaults.

        Raises:
            TypeError: If required inputs are missing or unexpected inputs are given.
        """
        input_specs = self._inputs_for_run.get(run_name, {})
        merged = dict(kwargs)

        for k, meta in input_specs.items():
            if k not in merged and meta['default'] is not _MISSING:
                merged[k] = meta['default']

        missing = [k for k, meta in input_specs.items()
                   if meta['required'] and k not in merged]
        if missing:
            raise TypeError(f"Missing required inputs for '{run_name}': {missing}")

        unknown = [k for k in merged if k not in input_specs and k not in sig.parameters]
        if unknown:
            raise TypeError(f"Unknown inputs provided: {unknown}. Declared inputs are: {sorted(input_specs)}")

        return merged

    def _type_check(self, kwargs: Dict[str, Any], *, run_name: str) -> None:
        """Checks input values against their declared types.

        ``None`` is accepted wherever it is also the declared default.

        Raises:
            TypeError: If an argument fails type validation.
        """
        input_specs = self._inputs_for_run.get(run_name, {})
        for name, value in kwargs.items():
            meta = input_specs.get(name)
            if meta is None or meta['type'] is None:
                continue
            if value is None and meta['default'] is None:
                continue
            expected = meta['type']
            if not isinstance(value, expected):
                expected_name = getattr(expected, "__name__", repr(expected))
                raise TypeError(
                    f"Argument '{name}' expected {expected_name}; got {type(value).__name__}"
                )

    def __repr__(self):
        """Return a compact summary representation of the module."""
        return f"<module deps={list(self.dependencies.keys())} inputs={list(self.inputs.keys())} run_funcs={list(self._run_funcs.keys())}>"

    def __str__(self):
        """Return a human-readable, multi-line summary of the module configuration."""
        deps = ", ".join(self.dependencies.keys()) or "None"
        inputs = ", ".join(self.inputs.keys()) or "None"
        run_funcs = ", ".join(self._run_funcs.keys()) or "None"
        return f"module:\n  Dependencies: {deps}\n  Inputs: {inputs}\n  Run Functions: {run_funcs}"
