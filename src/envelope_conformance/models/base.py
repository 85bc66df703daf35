from pydantic import BaseModel, ConfigDict


class ModelBase(BaseModel):
    """
    Base class for all envelope-conformance models.

    Forbids unknown fields and freezes instances, so findings and rules can
    be shared between threads and compared by value.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )


JsonPointer = str
