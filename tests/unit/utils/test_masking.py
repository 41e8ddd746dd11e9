from phone_confirmable.utils.masking import mask_phone, token_prefix


def test_mask_phone_keeps_last_three_digits():
    assert mask_phone("+15550100123") == "***123"
    assert mask_phone("12") == "***"
    assert mask_phone(None) is None


def test_token_prefix():
    assert token_prefix("123456") == "12****"
    assert token_prefix(None) is None
