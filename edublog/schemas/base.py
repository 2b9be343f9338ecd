from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from edublog.utils.utils import as_utc

# always timezone-aware and in UTC, whatever the database returned
UtcDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire. Either spelling is accepted on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
