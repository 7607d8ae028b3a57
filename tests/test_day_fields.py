from day_type import normalize_day_list, parse_days_field, serialize_days_field


def test_single_weekday_round_trip():
    for day in range(7):
        assert parse_days_field(serialize_days_field([day])) == [day]


def test_parse_dedupes_and_keeps_first_seen_order():
    assert parse_days_field("2,2,5") == [2, 5]
    assert parse_days_field("5, 2 ,5,2") == [5, 2]


def test_parse_drops_junk_and_clamps():
    assert parse_days_field("a, 3, 9, -1,,") == [3, 6, 0]


def test_parse_empty_values():
    assert parse_days_field(None) == []
    assert parse_days_field("") == []
    assert parse_days_field(" , x") == []


def test_serialize_normalizes():
    assert serialize_days_field([9, 1, 1, -4]) == "6,1,0"
    assert serialize_days_field([]) == ""


def test_normalize_day_list_rejects_non_lists():
    assert normalize_day_list("1,2") == []
    assert normalize_day_list(None) == []
    assert normalize_day_list({"days": [1]}) == []


def test_normalize_day_list_drops_out_of_range_instead_of_clamping():
    assert normalize_day_list([1, 7, -1, "3", 2.5, True, 1, 4.0]) == [1, 3, 4]


def test_parse_accepts_only_plain_numbers():
    assert parse_days_field("Infinity,1_0") == [6]
    assert parse_days_field("-Infinity, 0x3, 1e1, 4.0") == [0, 4]
    assert parse_days_field("2.5,2") == [2]


def test_normalize_day_list_ignores_infinity_and_underscores():
    assert normalize_day_list(["Infinity", "1_0", " 5 ", "2.0"]) == [5, 2]
