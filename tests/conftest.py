from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from tablegate.core.allowlist import AllowList  # noqa: E402
from tablegate.core.config import AuthConfig  # noqa: E402
from tablegate.core.principal import Principal  # noqa: E402

AUTH_URL = "http://127.0.0.1:8090/auth"


@pytest.fixture()
def auth_config() -> AuthConfig:
    return AuthConfig(
        credential_header="Authorization",
        authority_url=AUTH_URL,
        id_field="userid",
        display_name_field="username",
        allow_list_field="allowed_access",
    )


@pytest.fixture()
def scenario_allow_list() -> AllowList:
    return AllowList.from_mapping({"SCHEMA1": ["t1", "t2", "t3"], "SCHEMA2": ["table1"]})


@pytest.fixture()
def principal(scenario_allow_list: AllowList) -> Principal:
    return Principal(id="001", display_name="tapuser001", allow_list=scenario_allow_list)
