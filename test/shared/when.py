from typing import Any

from pytest_bdd import when
from pytest_bdd.model import Step

from test.shared.utils import extract_single_value


@when('the clock advances by minutes:')
def clock_advances_by_minutes(step: Step, context: dict[str, Any]) -> None:
    context['clock'].advance(minutes=int(extract_single_value(step)))
