# backend/tests/unit/test_schedule_commands.py

from datetime import date
from unittest.mock import patch

from rehome_ops.commands import schedule as schedule_cmd
from rehome_ops.core.exceptions import ValidationException


class TestScheduleCommands:
    def test_parser_reads_bulk_assign_arguments(self):
        args = schedule_cmd.build_parser().parse_args(
            ["bulk-assign", "2025-06-01", "2025-06-03", "Amsterdam", "Utrecht"]
        )
        assert args.start == date(2025, 6, 1)
        assert args.end == date(2025, 6, 3)
        assert args.cities == ["Amsterdam", "Utrecht"]

    def test_domain_errors_become_exit_code(self, capsys):
        with patch.object(
            schedule_cmd, "show_month", side_effect=ValidationException("nope", code="INVALID_MONTH")
        ):
            assert schedule_cmd.main(["month", "2025", "13"]) == 2
        assert "INVALID_MONTH" in capsys.readouterr().err

    def test_report_sends_problems_to_stderr(self, capsys):
        schedule_cmd.report("2025-06-10 is open for booking")
        schedule_cmd.report("2025-06-11: deadlock detected", "warn")
        captured = capsys.readouterr()
        assert "2025-06-10 is open for booking" in captured.out
        assert "deadlock detected" in captured.err
        assert "deadlock detected" not in captured.out
