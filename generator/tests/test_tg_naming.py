#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import pytest

from tg_context import Features
from tg_errors import IdentifierError
from tg_naming import id2str, identify, local_name, lower_camel_case, property_name, snakify


@pytest.mark.parametrize(
    "original, expected",
    [
        ("a", "a"),
        ("A", "a"),
        ("AB", "ab"),
        ("HTTPRequest", "http_request"),
        ("HTTP1Method", "http1_method"),
        ("GetUserIP", "get_user_ip"),
    ],
)
def test_snakify(original, expected):
    assert snakify(original) == expected


@pytest.mark.parametrize(
    "original, expected",
    [
        ("a", "a"),
        ("A", "a"),
        ("AB", "ab"),
        ("HTTPRequest", "httpRequest"),
        ("HTTP1Method", "http1Method"),
        ("GetUserIP", "getUserIp"),
        ("GetAPI", "getApi"),
        ("Get_API", "getApi"),
    ],
)
def test_lower_camel_case(original, expected):
    assert lower_camel_case(original) == expected


def test_identify_joins_words():
    f = Features()

    assert identify("user_name", f) == "UserName"
    assert identify("userName", f) == "UserName"
    assert identify("_private", f) == "Private"
    assert identify("$get_user_args", f) == "GetUserArgs"


def test_identify_rejects_invalid_identifiers():
    with pytest.raises(IdentifierError):
        identify("1abc", Features())
    with pytest.raises(IdentifierError):
        identify("___", Features())


def test_identify_compatible_names():
    f = Features(compatible_names=True)

    assert identify("new_user", f) == "NewUser_"
    assert identify("login_args", f) == "LoginArgs_"
    assert identify("login_result", f) == "LoginResult_"
    assert identify("user", f) == "User"
    # Synthesized names keep their form.
    assert identify("$login_args", f) == "LoginArgs"


def test_id2str():
    assert id2str(3) == "3"
    assert id2str(0) == "0"
    assert id2str(-2) == "_2"


def test_local_name_escapes_keywords():
    f = Features()

    assert local_name("user_id", f) == "userId"
    assert local_name("type", f) == "_type"
    assert local_name("range", f) == "_range"


def test_property_name_styles():
    assert property_name("UserID", Features()) == "userId"
    assert property_name("UserID", Features(snake_style_property_name=True)) == "user_id"
    assert property_name(
        "UserID", Features(snake_style_property_name=False, lower_camel_case_property_name=False)
    ) == "UserID"
