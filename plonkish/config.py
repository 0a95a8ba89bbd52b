"""Configuration helpers for synthesis and checking."""

import copy
from dataclasses import dataclass
from typing import Optional

from plonkish.primitives.field import FF, FieldType


@dataclass
class CheckerConfig:
    """Knobs for ``synthesize`` and the mock prover.

    Attributes:
        field: Field circuits are configured over
        max_workers: Thread-pool size for checking gates and lookups, and for
            ``Layouter.assign_regions``. 1 keeps everything on the calling
            thread; None lets the executor pick.
    """
    field: FieldType = FF
    max_workers: Optional[int] = 1

    def __deepcopy__(self, memo):
        # galois field classes are singletons and must not be copied
        return CheckerConfig(field=self.field, max_workers=self.max_workers)


_DEFAULT_CONFIG = CheckerConfig()


def get_default_config() -> CheckerConfig:
    return copy.deepcopy(_DEFAULT_CONFIG)


def set_default_config(config: CheckerConfig) -> None:
    global _DEFAULT_CONFIG
    _DEFAULT_CONFIG = copy.deepcopy(config)
