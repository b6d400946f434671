import os
from collections.abc import Callable

import pytest
from hypothesis import HealthCheck, settings

from tilde.tilde_ast import Program
from tilde.tilde_parser import Parser

settings.register_profile(
    "ci", max_examples=200, suppress_health_check=[HealthCheck.too_slow]
)
settings.register_profile("dev", max_examples=50)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


@pytest.fixture  # type: ignore[misc]
def parser() -> Parser:
    return Parser()


@pytest.fixture  # type: ignore[misc]
def parse(parser: Parser) -> Callable[[str], Program]:
    def _parse(source: str) -> Program:
        return parser.parse(source)

    return _parse
