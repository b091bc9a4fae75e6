from datetime import datetime

import pendulum
import pytest
from hypothesis import assume, given, strategies as st

from specvault._identifiers import (
    RESERVED_FOLDER_NAMES,
    is_semantic_version,
    timestamp_version_tag,
    validate_api_id,
    validate_folder_name,
    validate_version_tag,
)
from specvault.exceptions import ValidationError

kebab_names = st.from_regex(r"[a-z0-9]{1,10}(-[a-z0-9]{1,10}){0,4}", fullmatch=True)


@given(name=kebab_names)
def test_kebab_case_names_are_accepted(name: str) -> None:
    assume(len(name) >= 2 and name not in RESERVED_FOLDER_NAMES)

    assert validate_folder_name(name) == name


@given(name=kebab_names, index=st.integers(min_value=0))
def test_uppercase_folder_names_are_rejected(name: str, index: int) -> None:
    assume(any(c.isalpha() for c in name))
    letters = [i for i, c in enumerate(name) if c.isalpha()]
    position = letters[index % len(letters)]
    shouted = name[:position] + name[position].upper() + name[position + 1 :]

    with pytest.raises(ValidationError):
        _ = validate_folder_name(shouted)


@given(name=st.text(alphabet="abc-", min_size=65, max_size=80))
def test_overlong_folder_names_are_rejected(name: str) -> None:
    with pytest.raises(ValidationError, match="characters"):
        _ = validate_folder_name(name)


@given(api_id=st.from_regex(r"[a-z0-9-]+", fullmatch=True))
def test_api_ids_accept_lowercase_digits_and_hyphens(api_id: str) -> None:
    assert validate_api_id(api_id) == api_id


@given(api_id=st.text(min_size=1).filter(lambda s: not s.isascii() or "/" in s))
def test_api_ids_reject_path_separators_and_non_ascii(api_id: str) -> None:
    with pytest.raises(ValidationError):
        _ = validate_api_id(api_id)


@given(
    major=st.integers(min_value=0, max_value=999),
    minor=st.integers(min_value=0, max_value=999),
    patch=st.integers(min_value=0, max_value=999),
)
def test_semantic_tags_are_valid(major: int, minor: int, patch: int) -> None:
    tag = f"v{major}.{minor}.{patch}"

    assert validate_version_tag(tag) == tag
    assert is_semantic_version(tag)


@given(
    moment=st.datetimes(
        min_value=datetime(2000, 1, 1),  # noqa: DTZ001
        max_value=datetime(2999, 12, 31),  # noqa: DTZ001
    )
)
def test_timestamp_tags_are_valid_but_not_semantic(moment: datetime) -> None:
    instant = pendulum.datetime(
        moment.year,
        moment.month,
        moment.day,
        moment.hour,
        moment.minute,
        moment.second,
        tz="UTC",
    )

    tag = timestamp_version_tag(instant)

    assert validate_version_tag(tag) == tag
    assert not is_semantic_version(tag)
