import importlib
import logging

logger = logging.getLogger(__name__)


def load_sdk(spec: str, expected_base: type, *args, **kwargs):
    """
    Instantiate an SDK adapter from a "package.module:ClassName" spec.

    The class must subclass `expected_base`; constructor arguments are passed
    through (typically the ledger gateway).
    """
    if not spec or ':' not in spec:
        raise ValueError(f"SDK spec must look like 'package.module:ClassName', got {spec!r}")
    module_name, _, class_name = spec.partition(':')
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f'Cannot import SDK module {module_name}: {e}') from e
    cls = getattr(module, class_name, None)
    if cls is None:
        raise ValueError(f'SDK module {module_name} has no attribute {class_name}')
    if not (isinstance(cls, type) and issubclass(cls, expected_base)):
        raise ValueError(f'{spec} does not implement {expected_base.__name__}')
    logger.info(f'Loaded {expected_base.__name__} adapter {spec}')
    return cls(*args, **kwargs)
