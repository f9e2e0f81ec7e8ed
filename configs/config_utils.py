import copy
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def _short(value: Any, limit: int = 80) -> str:
    text = str(value)
    return text if len(text) <= limit else text[:limit] + '...'


class ConfigMerger:
    @staticmethod
    def merge(base: Dict[str, Any], override: Dict[str, Any], context_description: str = 'ConfigMerge') -> Dict[str, Any]:
        """
        Merges an 'override' dictionary into a 'base' dictionary.
        - Dictionaries are merged recursively.
        - Other values in override replace the ones in base.
        Neither argument is mutated.
        """
        if not isinstance(base, dict):
            logger.error('[%s] Base for merge is not a dictionary (type: %s).', context_description, type(base))
            return copy.deepcopy(override) if isinstance(override, dict) else {}
        if not isinstance(override, dict):
            logger.warning('[%s] Override for merge is not a dictionary (type: %s). Returning base.',
                           context_description, type(override))
            return copy.deepcopy(base)

        merged = copy.deepcopy(base)
        for key, override_value in override.items():
            if key not in merged:
                merged[key] = copy.deepcopy(override_value)
                logger.debug("[%s] Added new key '%s': %s", context_description, key, _short(override_value))
                continue
            base_value = merged[key]
            if isinstance(base_value, dict) and isinstance(override_value, dict):
                merged[key] = ConfigMerger.merge(base_value, override_value, f'{context_description} -> {key}')
            elif base_value != override_value:
                merged[key] = copy.deepcopy(override_value)
                logger.debug("[%s] Overridden key '%s'. Old: %s, New: %s",
                             context_description, key, _short(base_value), _short(override_value))
        return merged
