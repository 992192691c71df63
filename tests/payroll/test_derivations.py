import pytest

from hrms.core.exceptions import ValidationError
from hrms.payroll.derivations import normalize_breakdown, payroll_totals, round_half_up, salary_totals
from hrms.payroll.model import ALLOWANCE_KEYS, DEDUCTION_KEYS


def test_salary_totals():
    t = salary_totals(
        basic=30000,
        hra=12000,
        allowances={"conveyance": 1600, "special": 6400},
        deductions={"pf": 1800, "tds": 1000},
    )
    assert t.gross_salary == 50000
    assert t.net_salary == 47200
    assert t.ctc == 51800


def test_payroll_totals():
    t = payroll_totals({"basic": 100.0, "bonus": 50.5}, {"pf": 20.0, "lop_deduction": 10.25})
    assert t.gross_earnings == 150.5
    assert t.total_deductions == 30.25
    assert t.net_payable == 120.25


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(961.53) == 962


def test_normalize_breakdown_accepts_camel_case_and_fills_missing():
    out = normalize_breakdown({"professionalTax": "200", "pf": 1800}, DEDUCTION_KEYS, "deductions")
    assert out["professional_tax"] == 200
    assert out["pf"] == 1800
    assert out["esi"] == 0
    assert set(out) == set(DEDUCTION_KEYS)


def test_normalize_breakdown_rejects_unknown_and_negative():
    with pytest.raises(ValidationError):
        normalize_breakdown({"yacht": 1}, ALLOWANCE_KEYS, "allowances")
    with pytest.raises(ValidationError):
        normalize_breakdown({"food": -1}, ALLOWANCE_KEYS, "allowances")
