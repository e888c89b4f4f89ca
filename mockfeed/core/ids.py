from __future__ import annotations

import uuid


def new_contract_id() -> str:
    return str(uuid.uuid4())


def new_session_id() -> str:
    return str(uuid.uuid4())
