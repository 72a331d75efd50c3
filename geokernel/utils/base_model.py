# geokernel/utils/base_model.py
from typing import TypeVar, Any, cast
from pydantic import BaseModel

T = TypeVar('T', bound=BaseModel)


class ImmutableModel(BaseModel):
    """
    Base class for all geometry value types.

    Every kernel value (points, lines, planes, circles, result records) is a
    pure value with no identity beyond its fields:
    - Immutability: instances are frozen after creation, and therefore hashable
    - Copyability: modified copies are created via with_changes()
    """
    model_config = {
        "frozen": True,
    }

    def with_changes(self: T, **changes: Any) -> T:
        """
        Create a new instance with specified changes.

        The changed data is validated again, so field validators run on the
        new values exactly as they do on construction.

        Args:
            **changes: Keyword arguments with field values to change

        Returns:
            New instance with updated values

        Raises:
            ValueError: If an invalid field name is provided
        """
        current_data = self.model_dump()

        for key, value in changes.items():
            if key not in current_data:
                raise ValueError(f"Invalid field: {key}")
            current_data[key] = value

        cls = self.__class__
        return cast(T, cls.model_validate(current_data))
