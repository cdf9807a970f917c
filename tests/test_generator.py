import random
import string

import pytest

from pwservice.errors import CategoryExhausted, InvalidCount, InvalidLength, MalformedInput, NoCategoriesEnabled
from pwservice.generator import (
    AMBIGUOUS,
    DEFAULT_SYMBOLS,
    GenerationOptions,
    build_charsets,
    generate,
    generate_multiple,
    secure_shuffle,
    validate_options,
)


CATEGORY_SETS = {
    "include_upper": string.ascii_uppercase,
    "include_lower": string.ascii_lowercase,
    "include_digits": string.digits,
    "include_symbols": DEFAULT_SYMBOLS,
}


def test_length_and_classes():
    pw = generate(GenerationOptions(length=12))
    assert len(pw) == 12
    assert any(c.isupper() for c in pw)
    assert any(c.islower() for c in pw)
    assert any(c.isdigit() for c in pw)
    assert any(c in DEFAULT_SYMBOLS for c in pw)


def test_no_symbols():
    pw = generate(GenerationOptions(length=10, include_symbols=False))
    assert len(pw) == 10
    assert not any(c in DEFAULT_SYMBOLS for c in pw)


def test_minimum_length_with_all_categories():
    for _ in range(50):
        pw = generate(GenerationOptions(length=4))
        assert len(pw) == 4
        assert any(c in string.ascii_uppercase for c in pw)
        assert any(c in string.ascii_lowercase for c in pw)
        assert any(c in string.digits for c in pw)
        assert any(c in DEFAULT_SYMBOLS for c in pw)


@pytest.mark.parametrize("length", [3, 0, -1, 129, 500])
def test_out_of_range_length_raises(length):
    with pytest.raises(InvalidLength):
        generate(GenerationOptions(length=length))


def test_boundary_lengths_accepted():
    assert len(generate(GenerationOptions(length=4))) == 4
    assert len(generate(GenerationOptions(length=128))) == 128


def test_no_categories_raises():
    opts = GenerationOptions(include_upper=False, include_lower=False, include_digits=False, include_symbols=False)
    with pytest.raises(NoCategoriesEnabled):
        generate(opts)


def test_excluding_all_digits_exhausts_category():
    opts = GenerationOptions(include_digits=True, exclude_chars="0123456789")
    with pytest.raises(CategoryExhausted) as exc:
        generate(opts)
    assert exc.value.category == "digits"
    assert "digits" in str(exc.value)


def test_exhausted_category_fails_before_drawing(monkeypatch):
    import pwservice.generator as gen

    def boom(n):
        raise AssertionError("randomness consumed")

    monkeypatch.setattr(gen, "randbelow", boom)
    with pytest.raises(CategoryExhausted):
        gen.generate(GenerationOptions(exclude_chars=string.ascii_lowercase))


def test_avoid_ambiguous():
    opts = GenerationOptions(length=128, avoid_ambiguous=True)
    for _ in range(20):
        pw = generate(opts)
        assert not set(pw) & set(AMBIGUOUS)


def test_multibyte_exclusion_is_per_code_point():
    # non-ASCII exclusions are matched whole and leave the ASCII charsets intact
    charsets = dict(build_charsets(GenerationOptions(exclude_chars="Aé€")))
    assert "A" not in charsets["upper"]
    assert len(charsets["upper"]) == 25
    assert charsets["lower"] == string.ascii_lowercase


def test_properties_over_random_options():
    rng = random.Random(1234)
    for _ in range(300):
        flags = {k: rng.random() < 0.6 for k in CATEGORY_SETS}
        if not any(flags.values()):
            flags["include_lower"] = True
        exclude = "".join(rng.sample(string.ascii_letters + string.digits + DEFAULT_SYMBOLS, rng.randint(0, 8)))
        opts = GenerationOptions(
            length=rng.randint(4, 128),
            avoid_ambiguous=rng.random() < 0.5,
            exclude_chars=exclude,
            require_each_category=rng.random() < 0.5,
            **flags,
        )
        excluded = set(exclude) | (set(AMBIGUOUS) if opts.avoid_ambiguous else set())
        try:
            pw = generate(opts)
        except CategoryExhausted:
            continue
        assert len(pw) == opts.length
        assert not set(pw) & excluded
        for flag, chars in CATEGORY_SETS.items():
            if not flags[flag]:
                assert not any(c in chars for c in pw)
            elif opts.require_each_category:
                assert any(c in chars for c in pw)


def test_generate_multiple_count():
    opts = GenerationOptions(length=20, avoid_ambiguous=True)
    pws = generate_multiple(7, opts)
    assert len(pws) == 7
    for pw in pws:
        assert len(pw) == 20
        assert not set(pw) & set(AMBIGUOUS)


@pytest.mark.parametrize("count", [0, -3, 101])
def test_generate_multiple_invalid_count(count):
    with pytest.raises(InvalidCount):
        generate_multiple(count, GenerationOptions())


def test_generate_multiple_bounds():
    assert len(generate_multiple(1, GenerationOptions())) == 1
    assert len(generate_multiple(100, GenerationOptions(length=8))) == 100


def test_from_mapping_defaults_and_parsing():
    opts = GenerationOptions.from_mapping({})
    assert opts == GenerationOptions()

    opts = GenerationOptions.from_mapping({
        "length": "24",
        "includeUppercase": "false",
        "includeSymbols": "0",
        "excludeAmbiguous": "yes",
        "exclude": "xyz",
        "requireEach": False,
    })
    assert opts.length == 24
    assert opts.include_upper is False
    assert opts.include_lower is True
    assert opts.include_symbols is False
    assert opts.avoid_ambiguous is True
    assert opts.exclude_chars == "xyz"
    assert opts.require_each_category is False


def test_from_mapping_rejects_non_integer_length():
    with pytest.raises(MalformedInput):
        GenerationOptions.from_mapping({"length": "long"})


@pytest.mark.parametrize("value", [12.9, 12.0, "12.5", True, [12], {"n": 12}])
def test_from_mapping_never_truncates_length(value):
    with pytest.raises(MalformedInput):
        GenerationOptions.from_mapping({"length": value})


def test_from_mapping_accepts_integer_strings():
    assert GenerationOptions.from_mapping({"length": " 20 "}).length == 20
    assert GenerationOptions.from_mapping({"length": 20}).length == 20


def test_secure_shuffle_has_no_positional_bias():
    # chi-square on where the first element lands
    n, trials = 8, 8000
    counts = [0] * n
    for _ in range(trials):
        items = list(range(n))
        secure_shuffle(items)
        counts[items.index(0)] += 1
    expected = trials / n
    chi2 = sum((c - expected) ** 2 / expected for c in counts)
    # 7 degrees of freedom; p=0.001 critical value is ~24.3
    assert chi2 < 40


def test_seed_characters_are_not_positionally_biased():
    # one digit is always seeded and "0" is the only digit left
    opts = GenerationOptions(
        length=8,
        include_upper=False,
        include_symbols=False,
        exclude_chars="123456789",
    )
    trials = 4000
    counts = [0] * opts.length
    for _ in range(trials):
        pw = generate(opts)
        for i, c in enumerate(pw):
            if c == "0":
                counts[i] += 1
    total = sum(counts)
    expected = total / opts.length
    chi2 = sum((c - expected) ** 2 / expected for c in counts)
    assert chi2 < 40


def test_validate_options_is_standalone_check():
    validate_options(GenerationOptions(length=4))
    with pytest.raises(InvalidLength):
        validate_options(GenerationOptions(length=200))


def test_fill_only_path_without_seeding():
    opts = GenerationOptions(length=4, include_upper=False, include_symbols=False,
                             avoid_ambiguous=True, require_each_category=False)
    for _ in range(100):
        pw = generate(opts)
        assert len(pw) == 4
        assert not set(pw) & set(AMBIGUOUS)
        assert all(c.islower() or c.isdigit() for c in pw)
