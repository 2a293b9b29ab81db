from __future__ import annotations

import os
from dataclasses import dataclass, field
from uuid import uuid4

LOCAL_REGION = "us-east-1"
LOCAL_ACCOUNT_ID = "000000000000"


def _function_name() -> str:
    return os.getenv("AWS_LAMBDA_FUNCTION_NAME", "hello-world")


@dataclass(frozen=True)
class LocalInvocationContext:
    aws_request_id: str = field(default_factory=lambda: str(uuid4()))
    function_name: str = field(default_factory=_function_name)
    function_version: str = "$LATEST"
    memory_limit_in_mb: int = 128

    @property
    def invoked_function_arn(self) -> str:
        return (
            f"arn:aws:lambda:{LOCAL_REGION}:{LOCAL_ACCOUNT_ID}:function:{self.function_name}"
        )
