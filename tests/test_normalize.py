from normalize import normalize, resolve_symbol


def test_full_debank_token():
    raw = {
        "id": "0xdac17f958d2ee523a2206206994597c13d831ec7",
        "chain": "eth",
        "name": "Tether USD",
        "symbol": "USDT",
        "display_symbol": None,
        "optimized_symbol": "USDT",
        "decimals": 6,
        "logo_url": "https://static.debank.com/usdt.png",
        "is_verified": True,
        "is_core": True,
        "price": 1.0,
        "amount": 250.5,
    }
    h = normalize(raw, "0xAbC", "eth")
    assert h.wallet == "0xAbC"
    assert h.chain == "eth"
    assert h.token_id == raw["id"]
    assert h.symbol == "USDT"
    assert h.decimals == 6
    assert h.price_usd == 1.0
    assert h.amount == 250.5
    assert h.value_usd == 250.5
    assert h.is_core and h.is_verified
    assert h.logo_url == raw["logo_url"]
    assert h.chains == ("eth",)


def test_missing_fields_default():
    h = normalize({}, "w", "arb")
    assert h.token_id == ""
    assert h.symbol == ""
    assert h.name == ""
    assert h.decimals is None
    assert h.price_usd == 0.0
    assert h.amount == 0.0
    assert h.value_usd == 0.0
    assert h.logo_url is None
    assert not h.is_core


def test_non_dict_raw_is_tolerated():
    h = normalize(None, "w", "eth")  # type: ignore[arg-type]
    assert h.value_usd == 0.0


def test_symbol_priority():
    assert resolve_symbol({"optimized_symbol": "ETH", "display_symbol": "eth.", "symbol": "WETH"}) == "ETH"
    assert resolve_symbol({"optimized_symbol": "", "display_symbol": "USDC.e", "symbol": "USDC"}) == "USDC.e"
    assert resolve_symbol({"optimized_symbol": None, "symbol": "DAI"}) == "DAI"
    assert resolve_symbol({"symbol": 42}) == ""


def test_garbage_numbers_become_zero():
    h = normalize({"id": "t", "price": "n/a", "amount": "12", "decimals": "x"}, "w", "eth")
    assert h.price_usd == 0.0
    assert h.amount == 12.0
    assert h.value_usd == 0.0
    assert h.decimals is None


def test_negative_price_clamped_negative_amount_kept():
    h = normalize({"id": "t", "price": -4, "amount": -2}, "w", "eth")
    assert h.price_usd == 0.0
    assert h.amount == -2.0
    assert h.value_usd == 0.0


def test_numeric_id_is_stringified():
    assert normalize({"id": 1234}, "w", "eth").token_id == "1234"


def test_oversized_integers_become_zero():
    h = normalize({"id": "spam", "price": 10**400, "amount": 10**400}, "w", "eth")
    assert h.price_usd == 0.0
    assert h.amount == 0.0
    assert h.value_usd == 0.0
