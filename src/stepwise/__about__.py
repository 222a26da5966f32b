DEFAULT_MODEL = "openai:gpt-4o-mini"

__version__ = "0.1.0"
__author__ = "PsiACE"
__author_email__ = "psiace@apache.org"
__copyright__ = f"Copyright (c) 2026, {__author__}."
__homepage__ = "https://github.com/psiace/stepwise"
__docs__ = "Multi-step LLM responses with a deterministic fake dispatcher for tests."

__all__ = [
    "DEFAULT_MODEL",
    "__author__",
    "__author_email__",
    "__copyright__",
    "__docs__",
    "__homepage__",
    "__version__",
]
