"""Unit tests for the access-code boundary."""

import pytest

from maneuver.access import (
    CODE_LIFETIME,
    AccessError,
    AccessToken,
    CodeAlreadyUsed,
    CodeExpired,
    CodeMismatch,
    CodeNotFound,
    InMemoryAccessService,
    InvalidEmail,
    SendFailure,
    email_to_uid,
)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def outbox():
    return []


@pytest.fixture
def service(clock, outbox):
    return InMemoryAccessService(
        sender=lambda email, code: outbox.append((email, code)),
        clock=clock,
        seed=11,
    )


class TestRequestCode:
    """Test code issuance."""

    def test_sends_six_digit_code(self, service, outbox):
        receipt = service.request_code("pilot@example.com")

        assert receipt.email == "pilot@example.com"
        assert receipt.expires_at == 1000.0 + CODE_LIFETIME
        email, code = outbox[-1]
        assert email == "pilot@example.com"
        assert len(code) == 6
        assert code.isdigit()

    @pytest.mark.parametrize("email", ["", "pilot", "pilot@example", "pi lot@example.com"])
    def test_invalid_email(self, service, email):
        with pytest.raises(InvalidEmail):
            service.request_code(email)

    def test_send_failure(self, clock):
        def broken(email, code):
            raise ConnectionError("smtp down")

        service = InMemoryAccessService(sender=broken, clock=clock, seed=1)

        with pytest.raises(SendFailure):
            service.request_code("pilot@example.com")
        with pytest.raises(CodeNotFound):
            service.verify_code("pilot@example.com", "000000")

    def test_seeded_codes_repeat(self, clock):
        codes = []
        for _ in range(2):
            sent = []
            InMemoryAccessService(
                sender=lambda email, code: sent.append(code), clock=clock, seed=99,
            ).request_code("pilot@example.com")
            codes.append(sent[0])
        assert codes[0] == codes[1]


class TestVerifyCode:
    """Test code redemption."""

    def test_success(self, service, outbox):
        service.request_code("Pilot.One@Example.com")
        code = outbox[-1][1]

        token = service.verify_code("pilot.one@example.com", code)

        assert token == AccessToken(uid="pilot_one_example_com", email="pilot.one@example.com")

    def test_single_use(self, service, outbox):
        service.request_code("pilot@example.com")
        code = outbox[-1][1]
        service.verify_code("pilot@example.com", code)

        with pytest.raises(CodeAlreadyUsed):
            service.verify_code("pilot@example.com", code)

    def test_expired(self, service, outbox, clock):
        service.request_code("pilot@example.com")
        clock.now += CODE_LIFETIME + 1.0

        with pytest.raises(CodeExpired):
            service.verify_code("pilot@example.com", outbox[-1][1])

    def test_mismatch(self, service, outbox):
        service.request_code("pilot@example.com")
        wrong = "000000" if outbox[-1][1] != "000000" else "111111"

        with pytest.raises(CodeMismatch):
            service.verify_code("pilot@example.com", wrong)

    def test_not_found(self, service):
        with pytest.raises(CodeNotFound):
            service.verify_code("nobody@example.com", "123456")

    def test_errors_share_base(self):
        for error in (InvalidEmail, SendFailure, CodeExpired, CodeMismatch, CodeAlreadyUsed, CodeNotFound):
            assert issubclass(error, AccessError)

    def test_uid(self):
        assert email_to_uid("a.b+c@d.io") == "a_b_c_d_io"
