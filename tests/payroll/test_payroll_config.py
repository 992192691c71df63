from __future__ import annotations

import pytest

from hrms.core.exceptions import ValidationError
from hrms.payroll.model import TaxSlab


@pytest.fixture
def service(container):
    return container.payroll_service


def test_first_read_creates_defaults(service, payroll_configs):
    config = service.get_config()
    assert config.config_id == 1
    assert (config.pf_percentage, config.esi_percentage, config.esi_threshold) == (12, 0.75, 21000)
    assert config.professional_tax_slab[1] == TaxSlab(min_salary=15001, max_salary=20000, tax=150)
    assert (config.payroll_processing_day, config.payment_day, config.financial_year_start) == (28, 1, 4)

    assert service.get_config().config_id == 1
    assert len(payroll_configs.saved) == 1


def test_update_merges_and_persists(service, payroll_configs):
    updated = service.update_config(
        pf_percentage=10,
        professional_tax_slab=[
            {"minSalary": 20001, "maxSalary": 999999999, "tax": 200},
            {"minSalary": 0, "maxSalary": 20000, "tax": 0},
        ],
    )
    assert updated.pf_percentage == 10
    assert updated.esi_percentage == 0.75
    assert [s.min_salary for s in updated.professional_tax_slab] == [0, 20001]
    assert payroll_configs.get_active() == updated
    assert len(payroll_configs.saved) == 1


@pytest.mark.parametrize(
    "changes",
    [
        {"pf_percentage": 120},
        {"esi_percentage": -1},
        {"payment_day": 0},
        {"financial_year_start": 13},
        {"professional_tax_slab": "none"},
        {"professional_tax_slab": [{"minSalary": 500, "maxSalary": 100, "tax": 0}]},
    ],
)
def test_invalid_update_leaves_config_untouched(service, payroll_configs, changes):
    before = service.get_config()
    with pytest.raises(ValidationError):
        service.update_config(**changes)
    assert payroll_configs.get_active() == before
