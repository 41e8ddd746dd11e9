from dataclasses import FrozenInstanceError

import pytest

from phone_confirmable.domain.value_objects import PhoneConfirmationToken


def test_generate_produces_six_digits_by_default():
    token = PhoneConfirmationToken.generate()

    assert len(token.value) == 6
    assert token.value.isdigit()


def test_generate_respects_requested_length():
    assert len(PhoneConfirmationToken.generate(8).value) == 8


def test_generate_keeps_leading_zeros(mocker):
    mocker.patch(
        "phone_confirmable.domain.value_objects.confirmation_token.secrets.randbelow",
        return_value=42,
    )

    assert PhoneConfirmationToken.generate(6).value == "000042"


@pytest.mark.parametrize("value", ["", "12ab56", "123", "1234567890123", " 123456"])
def test_rejects_malformed_values(value):
    with pytest.raises(ValueError):
        PhoneConfirmationToken(value)


def test_str_masks_all_but_the_prefix():
    assert str(PhoneConfirmationToken("123456")) == "12****"


def test_is_immutable():
    token = PhoneConfirmationToken("123456")
    with pytest.raises(FrozenInstanceError):
        token.value = "000000"
