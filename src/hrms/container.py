from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.config import WorkConfig
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.report_service import AttendanceReportService
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .corrections.service import CorrectionService
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .leave.mysql_holiday_repository import MySQLHolidayRepository
from .leave.mysql_leave_balance_repository import MySQLLeaveBalanceRepository
from .leave.mysql_leave_request_repository import MySQLLeaveRequestRepository
from .leave.mysql_leave_type_repository import MySQLLeaveTypeRepository
from .leave.repository import HolidayRepository, LeaveBalanceRepository, LeaveRequestRepository, LeaveTypeRepository
from .leave.service import HolidayService, LeaveService, LeaveTypeService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_bonus_repository import MySQLBonusRepository
from .payroll.mysql_config_repository import MySQLPayrollConfigRepository
from .payroll.mysql_payroll_repository import MySQLPayrollRepository
from .payroll.mysql_salary_repository import MySQLSalaryStructureRepository
from .payroll.repository import (
    BonusRepository,
    PayrollConfigRepository,
    PayrollRepository,
    SalaryStructureRepository,
)
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leave_requests_repo: LeaveRequestRepository
    leave_balances_repo: LeaveBalanceRepository
    leave_types_repo: LeaveTypeRepository
    holidays_repo: HolidayRepository
    salary_structures_repo: SalaryStructureRepository
    payrolls_repo: PayrollRepository
    bonuses_repo: BonusRepository
    payroll_config_repo: PayrollConfigRepository

    attendance_service: AttendanceService
    attendance_report_service: AttendanceReportService
    correction_service: CorrectionService
    leave_type_service: LeaveTypeService
    leave_service: LeaveService
    holiday_service: HolidayService
    payroll_service: PayrollService


def build_services(
    *,
    conn: Optional[DatabaseConnection],
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leave_requests_repo: LeaveRequestRepository,
    leave_balances_repo: LeaveBalanceRepository,
    leave_types_repo: LeaveTypeRepository,
    holidays_repo: HolidayRepository,
    salary_structures_repo: SalaryStructureRepository,
    payrolls_repo: PayrollRepository,
    bonuses_repo: BonusRepository,
    payroll_config_repo: PayrollConfigRepository,
    work_config: WorkConfig | None = None,
    company: Mapping[str, str] | None = None,
) -> Container:
    """Wire services over any repository implementations (MySQL or in-memory)."""
    work_config = work_config or WorkConfig()

    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        work_config=work_config,
        strategy_factory=AttendanceStrategyFactory(),
    )
    attendance_report_service = AttendanceReportService(attendance_repo)
    correction_service = CorrectionService(attendance_repo, employees_repo, work_config=work_config)
    leave_type_service = LeaveTypeService(leave_types_repo)
    leave_service = LeaveService(
        leave_requests_repo, leave_balances_repo, employees_repo, leave_type_service, holidays_repo
    )
    holiday_service = HolidayService(holidays_repo)
    payroll_service = PayrollService(
        payrolls=payrolls_repo,
        structures=salary_structures_repo,
        bonuses=bonuses_repo,
        employees=employees_repo,
        attendance=attendance_repo,
        leave_requests=leave_requests_repo,
        holidays=holidays_repo,
        configs=payroll_config_repo,
        calculator=StandardPayrollCalculator(),
        company=company,
    )

    return Container(
        conn=conn,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_requests_repo=leave_requests_repo,
        leave_balances_repo=leave_balances_repo,
        leave_types_repo=leave_types_repo,
        holidays_repo=holidays_repo,
        salary_structures_repo=salary_structures_repo,
        payrolls_repo=payrolls_repo,
        bonuses_repo=bonuses_repo,
        payroll_config_repo=payroll_config_repo,
        attendance_service=attendance_service,
        attendance_report_service=attendance_report_service,
        correction_service=correction_service,
        leave_type_service=leave_type_service,
        leave_service=leave_service,
        holiday_service=holiday_service,
        payroll_service=payroll_service,
    )


def build_container(
    *,
    db_config: dict | None = None,
    work_config: WorkConfig | None = None,
    company: Mapping[str, str] | None = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config) if db_config else None)
    return build_services(
        conn=conn,
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_requests_repo=MySQLLeaveRequestRepository(conn),
        leave_balances_repo=MySQLLeaveBalanceRepository(conn),
        leave_types_repo=MySQLLeaveTypeRepository(conn),
        holidays_repo=MySQLHolidayRepository(conn),
        salary_structures_repo=MySQLSalaryStructureRepository(conn),
        payrolls_repo=MySQLPayrollRepository(conn),
        bonuses_repo=MySQLBonusRepository(conn),
        payroll_config_repo=MySQLPayrollConfigRepository(conn),
        work_config=work_config,
        company=company,
    )
