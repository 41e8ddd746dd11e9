from datetime import timedelta

import pytest

from phone_confirmable.core.config.settings import Settings
from phone_confirmable.core.exceptions import ConfigurationError
from phone_confirmable.domain.value_objects import ConfirmationConfig


def test_defaults_require_confirmation_without_expiry():
    config = ConfirmationConfig()

    assert config.allow_unconfirmed_access_for == timedelta(0)
    assert config.confirm_within is None
    assert config.reconfirmable is True
    assert config.confirmation_keys == ("phone",)
    assert config.send_phone_changed_notification is False
    assert config.token_length == 6


def test_confirmation_keys_are_stored_as_tuple():
    config = ConfirmationConfig(confirmation_keys=["phone", "id"])

    assert config.confirmation_keys == ("phone", "id")


@pytest.mark.parametrize(
    "options",
    [
        {"allow_unconfirmed_access_for": timedelta(seconds=-1)},
        {"confirm_within": timedelta(days=-1)},
        {"confirmation_keys": ()},
        {"confirmation_keys": ("email",)},
        {"token_length": 3},
        {"token_length": 13},
    ],
)
def test_invalid_options_raise_configuration_error(options):
    with pytest.raises(ConfigurationError):
        ConfirmationConfig(**options)


def test_unlimited_grace_is_allowed():
    assert ConfirmationConfig(allow_unconfirmed_access_for=None).allow_unconfirmed_access_for is None


def test_required_fields_include_unconfirmed_phone_only_when_reconfirmable():
    assert "unconfirmed_phone" in ConfirmationConfig().required_fields
    assert "unconfirmed_phone" not in ConfirmationConfig(reconfirmable=False).required_fields
    assert "phone_confirmation_token" in ConfirmationConfig(reconfirmable=False).required_fields


def test_from_settings_reads_phone_confirmation_options():
    settings = Settings(
        _env_file=None,
        PHONE_CONFIRMATION_ALLOW_UNCONFIRMED_ACCESS_FOR="",
        PHONE_CONFIRMATION_CONFIRM_WITHIN="259200",
        PHONE_CONFIRMATION_RECONFIRMABLE=False,
        PHONE_CONFIRMATION_KEYS="phone, id",
        PHONE_CONFIRMATION_SEND_PHONE_CHANGED_NOTIFICATION=True,
        PHONE_CONFIRMATION_TOKEN_LENGTH=8,
    )

    config = ConfirmationConfig.from_settings(settings)

    assert config.allow_unconfirmed_access_for is None
    assert config.confirm_within == timedelta(days=3)
    assert config.reconfirmable is False
    assert config.confirmation_keys == ("phone", "id")
    assert config.send_phone_changed_notification is True
    assert config.token_length == 8
