import importlib
import json
import logging
import pkgutil
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from pydantic import TypeAdapter, ValidationError

from ..exceptions import DuplicateRuleError, RuleDefinitionError
from .core import MarkupNode, Rule

logger = logging.getLogger(__name__)

_RULE_LIST = TypeAdapter(List[Rule])


class RuleRegistry:
    """
    Ordered registry of diagnostic rules.

    Registration order is evaluation order: when several rules match the same node,
    their diagnostics are emitted in the order the rules were registered. Rules can
    only be added; once registered they are never replaced or removed.
    """

    RULES_PACKAGE = "markup_auditor.dom.rules"
    # Evaluation order of the built-in catalog; other modules follow alphabetically
    MODULE_ORDER = ["inline", "links", "images", "forms", "structure"]

    def __init__(self, rules: Optional[Iterable[Rule]] = None):
        self._rules: Dict[str, Rule] = {}
        if rules:
            self.extend(rules)

    def register(self, rule: Rule) -> Rule:
        """
        Registers a single rule.

        Raises:
            DuplicateRuleError: If a rule with the same id is already registered.
        """
        if rule.id in self._rules:
            raise DuplicateRuleError(rule.id)
        self._rules[rule.id] = rule
        return rule

    def extend(self, rules: Iterable[Rule]) -> None:
        """Registers several rules, preserving their order."""
        for rule in rules:
            self.register(rule)

    def rules_for(self, node: MarkupNode) -> List[Rule]:
        """Returns every rule whose predicate matches ``node``, in registration order."""
        return [rule for rule in self._rules.values() if rule.applies_to(node)]

    def get(self, rule_id: str) -> Optional[Rule]:
        return self._rules.get(rule_id)

    def ids(self) -> List[str]:
        return list(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry({len(self)} rules)"

    # --- Built-in catalog ---

    @classmethod
    def default(cls, disabled: Iterable[str] = ()) -> 'RuleRegistry':
        """
        Builds a registry from the built-in catalog.

        Every module in the 'markup_auditor.dom.rules' package exposing a ``RULES``
        list is loaded, in the order given by ``MODULE_ORDER``
        (remaining modules follow alphabetically). Rule ids in ``disabled`` are skipped.
        """
        disabled = set(disabled)
        registry = cls()
        catalog_ids = set()

        for module in cls._discover_modules():
            rules = getattr(module, "RULES", None)
            if not rules:
                continue
            for rule in rules:
                catalog_ids.add(rule.id)
                if rule.id in disabled:
                    logger.debug("Rule disabled by configuration: %s", rule.id)
                    continue
                registry.register(rule)
            logger.debug("Rule module loaded: %s (%d rules)", module.__name__, len(rules))

        unknown = disabled - catalog_ids
        if unknown:
            logger.warning("Disabled rule ids not found in catalog: %s", ", ".join(sorted(unknown)))

        return registry

    @classmethod
    def _discover_modules(cls) -> List:
        package = importlib.import_module(cls.RULES_PACKAGE)
        names = [name for _, name, _ in pkgutil.iter_modules(package.__path__)]
        order = cls.MODULE_ORDER
        names = [n for n in order if n in names] + sorted(n for n in names if n not in order)

        modules = []
        for name in names:
            full_name = f"{cls.RULES_PACKAGE}.{name}"
            try:
                modules.append(importlib.import_module(full_name))
            except ImportError as e:
                logger.error(f"Error loading rule module {name}: {e}")
        return modules

    # --- Data-defined rules ---

    def load_rules(self, path: Union[str, Path]) -> List[Rule]:
        """
        Loads a JSON file containing a list of rule objects and registers them.

        Returns:
            List[Rule]: The rules that were registered, in file order.

        Raises:
            RuleDefinitionError: If the file cannot be read or does not validate.
            DuplicateRuleError: If a rule id collides with a registered one.
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RuleDefinitionError(f"Could not read rule file {path}: {e}") from e

        try:
            rules = _RULE_LIST.validate_python(raw)
        except ValidationError as e:
            raise RuleDefinitionError(f"Invalid rule definitions in {path}: {e}") from e

        # Check every id up front so a bad file leaves the registry untouched
        seen = set(self._rules)
        for rule in rules:
            if rule.id in seen:
                raise DuplicateRuleError(rule.id)
            seen.add(rule.id)

        self.extend(rules)
        logger.info("Loaded %d rules from %s", len(rules), path)
        return rules
