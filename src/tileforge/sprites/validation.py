"""Schema checks for sprite sheet JSON documents."""

from typing import Any, cast

from .models import VALID_FRAME_SIZES, Direction


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class SpriteSheetSchema:
    """Validation rules for sprite sheet JSON structure."""

    REQUIRED_ROOT_FIELDS = {"id", "name", "image", "frameSize", "animations"}
    VALID_DIRECTIONS = {d.value for d in Direction}
    VALID_COMPATIBILITY = {"lpc", "rpgmaker"}

    @staticmethod
    def validate_root(data: dict[str, Any]) -> list[str]:
        """Validate root-level fields.

        Args:
            data: Parsed JSON data

        Returns:
            List of error messages (empty if valid)
        """
        errors: list[str] = []

        missing = SpriteSheetSchema.REQUIRED_ROOT_FIELDS - data.keys()
        if missing:
            errors.append(f"Missing required fields: {sorted(missing)}")

        if "id" in data and (not isinstance(data["id"], str) or not data["id"]):
            errors.append("'id' must be a non-empty string")
        if "image" in data and (not isinstance(data["image"], str) or not data["image"]):
            errors.append("'image' must be a non-empty string")

        frame_size = data.get("frameSize")
        if frame_size is not None:
            if not isinstance(frame_size, dict):
                errors.append("'frameSize' must be an object")
            else:
                size = cast(dict[str, Any], frame_size)
                for axis in ("width", "height"):
                    value = size.get(axis)
                    if not _is_int(value) or value not in VALID_FRAME_SIZES:
                        errors.append(
                            f"'frameSize.{axis}' must be one of {list(VALID_FRAME_SIZES)}, got {value!r}"
                        )

        for name in ("margin", "spacing"):
            value = data.get(name, 0)
            if not _is_int(value) or value < 0:
                errors.append(f"'{name}' must be a non-negative integer, got {value!r}")

        compatibility = data.get("compatibility")
        if compatibility is not None:
            if not isinstance(compatibility, dict):
                errors.append("'compatibility' must be an object")
            else:
                for key, value in cast(dict[str, Any], compatibility).items():
                    if key not in SpriteSheetSchema.VALID_COMPATIBILITY:
                        errors.append(f"Unknown compatibility flag {key!r}")
                    elif not isinstance(value, bool):
                        errors.append(f"Compatibility flag {key!r} must be a boolean")

        return errors

    @staticmethod
    def validate_animation(name: str, animation: Any) -> list[str]:
        """Validate one animation entry."""
        if not isinstance(animation, dict):
            return [f"Animation '{name}' must be an object"]

        errors: list[str] = []
        anim = cast(dict[str, Any], animation)

        frames = anim.get("frames")
        frame_count = 0
        if not isinstance(frames, list) or not frames:
            errors.append(f"Animation '{name}': 'frames' must be a non-empty array")
        else:
            frame_count = len(cast(list[Any], frames))
            for idx, frame in enumerate(cast(list[Any], frames)):
                if not isinstance(frame, dict):
                    errors.append(f"Animation '{name}' frame {idx} must be an object")
                    continue
                frame_data = cast(dict[str, Any], frame)
                for axis in ("x", "y"):
                    value = frame_data.get(axis)
                    if not _is_int(value) or value < 0:
                        errors.append(
                            f"Animation '{name}' frame {idx}: '{axis}' must be a non-negative integer"
                        )
                duration = frame_data.get("duration")
                if duration is not None and (not _is_int(duration) or duration <= 0):
                    errors.append(
                        f"Animation '{name}' frame {idx}: 'duration' must be a positive integer"
                    )

        duration = anim.get("duration")
        if not _is_int(duration) or duration <= 0:
            errors.append(f"Animation '{name}': 'duration' must be a positive integer")

        loop = anim.get("loop", True)
        if not isinstance(loop, bool):
            errors.append(f"Animation '{name}': 'loop' must be a boolean")

        directions = anim.get("directions")
        if directions is not None:
            if not isinstance(directions, dict):
                errors.append(f"Animation '{name}': 'directions' must be an object")
            else:
                for key, indices in cast(dict[str, Any], directions).items():
                    if key not in SpriteSheetSchema.VALID_DIRECTIONS:
                        errors.append(f"Animation '{name}': unknown direction {key!r}")
                        continue
                    if not isinstance(indices, list) or not indices:
                        errors.append(
                            f"Animation '{name}': direction '{key}' must be a non-empty array"
                        )
                        continue
                    bad = [
                        i for i in cast(list[Any], indices)
                        if not _is_int(i) or not 0 <= i < frame_count
                    ]
                    if bad:
                        errors.append(
                            f"Animation '{name}': direction '{key}' has frame indices out of range: {bad}"
                        )

        return errors

    @staticmethod
    def validate_sprite_sheet(data: Any) -> list[str]:
        """Validate a complete sprite sheet document.

        Args:
            data: Parsed JSON data

        Returns:
            List of all validation errors (empty if valid)
        """
        if not isinstance(data, dict):
            return ["Sprite sheet must be a JSON object"]

        doc = cast(dict[str, Any], data)
        errors = SpriteSheetSchema.validate_root(doc)

        animations = doc.get("animations")
        if animations is not None:
            if not isinstance(animations, dict):
                errors.append("'animations' must be an object keyed by name")
            else:
                for name, animation in cast(dict[str, Any], animations).items():
                    errors.extend(SpriteSheetSchema.validate_animation(str(name), animation))

        return errors
