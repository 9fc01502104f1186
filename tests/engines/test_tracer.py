"""Tests for the engine tracer and its input fingerprint."""

from datetime import date
from decimal import Decimal

from payroll_engines.tracer import compute_input_fingerprint, traced_engine
from payroll_kernel.domain.values import Bracket, EmployeeSnapshot


class TestInputFingerprint:

    def test_deterministic(self):
        args = {"gross": Decimal("3000"), "period": date(2023, 6, 1)}
        first = compute_input_fingerprint(("gross", "period"), args)
        second = compute_input_fingerprint(("gross", "period"), dict(args))
        assert first == second
        assert len(first) == 16

    def test_decimal_scale_ignored(self):
        a = compute_input_fingerprint(("gross",), {"gross": Decimal("3000")})
        b = compute_input_fingerprint(("gross",), {"gross": Decimal("3000.00")})
        assert a == b

    def test_values_distinguished(self):
        a = compute_input_fingerprint(("gross",), {"gross": Decimal("3000")})
        b = compute_input_fingerprint(("gross",), {"gross": Decimal("3000.01")})
        assert a != b

    def test_missing_field_is_null(self):
        a = compute_input_fingerprint(("gross",), {})
        b = compute_input_fingerprint(("gross",), {"gross": None})
        assert a == b

    def test_dataclasses_and_enums(self):
        employee = EmployeeSnapshot("emp-1", Decimal("3000"))
        a = compute_input_fingerprint(("employee", "bracket"), {"employee": employee, "bracket": Bracket.TOTAL})
        b = compute_input_fingerprint(
            ("employee", "bracket"),
            {"employee": EmployeeSnapshot("emp-1", Decimal("3000.0")), "bracket": "TOTAL"},
        )
        assert a == b


class TestTracedEngine:

    def test_emits_trace_and_returns_result(self, captured_logs):
        @traced_engine("sample", "2.1", fingerprint_fields=("base", "rate"))
        def apply_rate(base, rate=Decimal("1")):
            return base * rate

        assert apply_rate(Decimal("10"), rate=Decimal("2")) == Decimal("20")

        traces = [r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "sample"
        assert trace["engine_version"] == "2.1"
        assert trace["function"].endswith("apply_rate")
        assert trace["logger"] == "payroll_kernel.engines.tracer"

    def test_positional_and_keyword_calls_fingerprint_alike(self, captured_logs):
        @traced_engine("sample", "1.0", fingerprint_fields=("base",))
        def identity(base):
            return base

        identity(Decimal("5"))
        identity(base=Decimal("5"))

        fingerprints = [
            r["input_fingerprint"] for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE"
        ]
        assert len(fingerprints) == 2
        assert fingerprints[0] == fingerprints[1]
        assert fingerprints[0] != ""

    def test_no_fingerprint_fields(self, captured_logs):
        @traced_engine("sample", "1.0")
        def noop():
            return None

        noop()
        trace = next(r for r in captured_logs() if r["message"] == "PAYROLL_ENGINE_TRACE")
        assert trace["input_fingerprint"] == ""
