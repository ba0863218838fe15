from pydantic import BaseModel


class EnvConfig(BaseModel):
    """
    A single configuration key a client requires at construction time.

    Attributes:
        env_key (str): Raw key name without the client/engine prefix (e.g. "BASE_URL" for RAG_SUPABASE_BASE_URL).
        val_type (str): Expected value type: "string", "number", "bool" or "list".
        default (str | int | float | bool | list | None): Value used when the variable is unset. None marks the key as required.
    """

    env_key: str
    val_type: str
    default: str | int | float | bool | list | None = None
