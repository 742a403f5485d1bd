import pytest

from label_calc import InvalidArgument, PackingInput, calculate_packing, compute


def counts(result):
    return (
        result.full_containers,
        result.remainder_units,
        result.extra_container_needed,
        result.total_containers,
        result.full_pallets,
        result.remainder_containers,
        result.total_pallets,
    )


def test_exact_division_needs_no_extra_label():
    result = compute(1000, 50, 1)
    assert result.full_containers == 20
    assert result.remainder_units == 0
    assert result.extra_container_needed is False
    assert result.total_containers == 20


def test_uneven_division_adds_one_label():
    result = compute(1025, 50, 1)
    assert result.full_containers == 20
    assert result.remainder_units == 25
    assert result.extra_container_needed is True
    assert result.total_containers == 21
    assert result.labels_needed == 21


def test_partial_pallet_counts_as_a_pallet():
    result = compute(1025, 50, 10)
    assert result.total_containers == 21
    assert result.full_pallets == 2
    assert result.remainder_containers == 1
    assert result.total_pallets == 3
    assert result.containers_on_full_pallets == 20


def test_zero_pieces_give_all_zero_counts():
    assert counts(compute(0, 50, 10)) == (0, 0, False, 0, 0, 0, 0)
    assert counts(compute(0, 1, 1)) == (0, 0, False, 0, 0, 0, 0)


def test_exact_pallet():
    result = compute(500, 50, 10)
    assert counts(result) == (10, 0, False, 10, 1, 0, 1)


def test_single_package_pallets_match_package_count():
    for total in (1, 49, 50, 51, 1025, 9999):
        result = compute(total, 50, 1)
        assert result.full_pallets == result.total_containers
        assert result.remainder_containers == 0
        assert result.total_pallets == result.total_containers


@pytest.mark.parametrize(
    "args",
    [(10, 0, 5), (10, -3, 5), (10, 5, 0), (10, 5, -1), (-1, 5, 5), (10, 2.5, 5), (True, 5, 5)],
)
def test_invalid_arguments_are_rejected(args):
    with pytest.raises(InvalidArgument):
        compute(*args)


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        compute(10, 0, 5)


def test_invariants_hold_over_a_range_of_inputs():
    for per_package in (1, 3, 7, 50):
        for per_pallet in (1, 2, 9):
            for total in range(0, 400, 13):
                result = compute(total, per_package, per_pallet)
                assert result.total_containers * per_package >= total
                if result.total_containers > 0:
                    assert (result.total_containers - 1) * per_package < total
                assert 0 <= result.remainder_units < per_package
                assert 0 <= result.remainder_containers < per_pallet
                assert result.total_pallets * per_pallet >= result.total_containers


def test_results_are_deterministic():
    assert compute(1025, 50, 10) == compute(1025, 50, 10)


def test_result_is_immutable():
    result = compute(10, 3, 1)
    with pytest.raises(AttributeError):
        result.total_containers = 99


def test_input_from_mapping_parses_form_values():
    data = PackingInput.from_mapping(
        {"total_units": " 1025 ", "units_per_container": "50", "containers_per_pallet": 10.0}
    )
    assert data == PackingInput(1025, 50, 10)
    assert calculate_packing(data).total_pallets == 3


def test_input_from_mapping_defaults_to_single_package_pallets():
    data = PackingInput.from_mapping({"total_units": 10, "units_per_container": 3})
    assert data.containers_per_pallet == 1


@pytest.mark.parametrize(
    "raw",
    [
        {"units_per_container": 3},
        {"total_units": "ten", "units_per_container": 3},
        {"total_units": 10, "units_per_container": 2.5},
        {"total_units": 10, "units_per_container": None},
    ],
)
def test_input_from_mapping_rejects_malformed_values(raw):
    with pytest.raises(ValueError, match="Invalid packing input"):
        PackingInput.from_mapping(raw)


def test_to_dict_contains_counts_and_trace():
    data = compute(1025, 50, 10).to_dict()
    assert data["total_containers"] == 21
    assert data["remainder_units"] == 25
    assert data["total_pallets"] == 3
    assert data["derivation_trace"][0] == "Total pieces: 1025"


def test_input_from_mapping_accepts_whole_number_strings():
    data = PackingInput.from_mapping(
        {"total_units": "10.0", "units_per_container": " 5 ", "containers_per_pallet": "2.0"}
    )
    assert data == PackingInput(10, 5, 2)
    with pytest.raises(ValueError):
        PackingInput.from_mapping({"total_units": "10.5", "units_per_container": "5"})
    with pytest.raises(ValueError):
        PackingInput.from_mapping({"total_units": "nan", "units_per_container": "5"})
