"""Reading table description files into a tree of scene objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from flipperkit.behaviors import UserProperty
from flipperkit.modules import ModuleLoadError, ModuleRegistry
from flipperkit.scene_shapes import Shape, ShapeProperty, read_shape
from flipperkit.signals import SignalRegistry
from flipperkit.sound import SoundLibrary
from flipperkit.tokens import FileVersion, LoaderError, TokenReader

log = logging.getLogger(__name__)

Triple = tuple[float, float, float]


@dataclass
class StateItem:
    """One state of a state behavior and what happens on entering it."""

    act_signal: int = 0
    collision_signal: int = 0
    collision_state: int = 0
    delay_state: int = 0
    delay: int = 0
    move_steps: int = 0
    translation: Triple = (0.0, 0.0, 0.0)
    rotation: Triple = (0.0, 0.0, 0.0)
    light: bool = False
    sound: int = -1
    music: int = -1
    user_property: int | None = None
    shape_property: int | None = None
    texcoords: list[tuple[float, float]] = field(default_factory=list)
    shape_enable: list[bool] = field(default_factory=list)


@dataclass
class AnimationSpec:
    """A keyframe animation of rotation, translation or light."""

    kind: str
    step: int
    points: list[Triple] = field(default_factory=list)
    end: Triple | None = None


@dataclass
class LightSpec:
    """A point light switched by a behavior."""

    color: Triple
    position: Triple
    constant: float = 1.0
    linear: float = 0.0
    quadratic: float = 0.1
    bounds: float = 10.0
    on: bool = False


@dataclass
class SceneObject:
    """A group of the table: transform, shapes, behavior and children."""

    name: str
    translation: Triple = (0.0, 0.0, 0.0)
    rotation: Triple = (0.0, 0.0, 0.0)
    scale: Triple = (1.0, 1.0, 1.0)
    flags: set[str] = field(default_factory=set)
    user_properties: UserProperty = UserProperty.NONE
    collision_group: int = 0
    collision: bool = False
    shapes: list[Shape] = field(default_factory=list)
    children: list["SceneObject"] = field(default_factory=list)
    behavior: str | None = None
    settings: dict[str, Any] = field(default_factory=dict)
    state_items: list[StateItem] = field(default_factory=list)
    light: LightSpec | None = None
    animation: AnimationSpec | None = None


_GROUP_FLAGS = {"transform_once", "no_light", "light_once", "no_signal"}


def _default_texture_loader(path: str) -> Any:
    candidate = Path(path)
    return candidate if candidate.is_file() else None


class SceneLoader:
    """Parses table description text into scene objects.

    ``modules`` holds the registry used for ``module`` blocks and
    ``use_modules`` can be cleared to record module names without loading them.
    """

    def __init__(self, registry: SignalRegistry, sounds: SoundLibrary | None = None,
                 data_dir: str | Path = ".") -> None:
        self.registry = registry
        self.sounds = sounds if sounds is not None else SoundLibrary()
        self.data_dir = str(data_dir)
        self.module_dir = str(data_dir)
        self.modules: ModuleRegistry | None = None
        self.use_modules = True
        self.texture_loader: Callable[[str], Any] = _default_texture_loader
        self.version = FileVersion()
        self.line_number = 0

    def load_file(self, path: str | Path) -> list[SceneObject]:
        """Read a table file; raise LoaderError if it is missing or malformed."""
        try:
            text = Path(path).read_text()
        except OSError as exc:
            raise LoaderError(f"file not found: {path}") from exc
        return self.parse(text)

    def parse(self, text: str) -> list[SceneObject]:
        """Parse table description text and return its top level objects."""
        reader = TokenReader(text)
        self.version = FileVersion()
        objects: list[SceneObject] = []
        try:
            token = reader.next_word()
            if token == "version":
                reader.expect("{")
                self.version = FileVersion(reader.next_int(), reader.next_int(),
                                           reader.next_int())
                reader.expect("}")
                if self.version.compare(0, 3, 0) > 0:
                    log.warning("Version above 0.3.0 not supported, file is %d %d %d",
                                self.version.major, self.version.minor, self.version.micro)
            else:
                log.info("Version string not found, assuming 0.2.0")
            while token is not None:
                if token == "object":
                    objects.append(self._load_object(reader))
                token = reader.next_word()
        finally:
            self.line_number = reader.line_number
        return objects

    # -- helpers ---------------------------------------------------------

    @staticmethod
    def _word(reader: TokenReader) -> str:
        token = reader.next_word()
        if token is None:
            raise LoaderError("unexpected end of input", reader.line_number)
        return token

    def _data_path(self, name: str) -> str:
        return f"{self.data_dir}/{name}"

    def _read_sound(self, reader: TokenReader, what: str) -> int:
        token = self._word(reader)
        if token == "sound":
            return self.sounds.load_sample(self._data_path(self._word(reader)))
        if token == "no_sound":
            return -1
        raise LoaderError(f"No sound field in {what}", reader.line_number)

    def _triple(self, reader: TokenReader) -> Triple:
        return (reader.next_float(), reader.next_float(), reader.next_float())

    # -- objects ---------------------------------------------------------

    def _load_object(self, reader: TokenReader) -> SceneObject:
        obj = SceneObject(name=self._word(reader))
        reader.expect("{")
        obj.translation = self._triple(reader)
        obj.rotation = self._triple(reader)
        if self.version.compare(0, 3, 0) >= 0:
            obj.scale = self._triple(reader)
        self._load_misc(reader, obj, None)
        return obj

    def _load_misc(self, reader: TokenReader, obj: SceneObject,
                   owner: SceneObject | None) -> None:
        token = self._word(reader)
        while token != "}":
            if token == "properties":
                self._load_properties(reader, obj)
            elif token == "arm_behavior":
                self._load_arm(reader, obj)
            elif token == "state_behavior":
                reader.expect("{")
                self._set_behavior(obj, "state", use_move=False, use_texcoord=False,
                                   use_shape=False, light=None)
                self._load_misc(reader, obj, obj)
            elif token == "bumper_behavior":
                self._load_bumper(reader, obj)
            elif token == "plunger_behavior":
                reader.expect("{")
                self._set_behavior(obj, "plunger",
                                   sound=self._read_sound(reader, "PlungerBehavior"))
                obj.user_properties |= UserProperty.PLUNGER
                self._load_misc(reader, obj, obj)
            elif token == "light":
                self._load_light(reader, obj, owner)
            elif token == "state_item":
                self._load_state_item(reader, obj, owner)
            elif token == "animation":
                self._load_animation(reader, obj)
            elif token == "shape":
                obj.shapes.append(read_shape(
                    reader, lambda name: self.texture_loader(self._data_path(name))))
            elif token == "script":
                self._load_script(reader, obj)
            elif token == "module":
                self._load_module(reader, obj)
            elif token == "sub_object":
                obj.children.append(self._load_object(reader))
            else:
                raise LoaderError(f"UNKNOWN in misc block: {token}", reader.line_number)
            token = self._word(reader)

    @staticmethod
    def _set_behavior(obj: SceneObject, kind: str, **settings: Any) -> None:
        obj.behavior = kind
        obj.settings = dict(settings)

    def _load_properties(self, reader: TokenReader, obj: SceneObject) -> None:
        reader.expect("{")
        token = self._word(reader)
        while token != "}":
            if token in _GROUP_FLAGS:
                obj.flags.add(token)
            elif token == "wall":
                obj.user_properties |= UserProperty.WALLS
            elif token == "wall_one_way":
                obj.user_properties |= UserProperty.WALLS_ONE
            elif token == "group_1":
                obj.collision_group = 1
            elif token == "alpha_test":
                for shape in obj.shapes:
                    shape.properties |= ShapeProperty.ALPHATEST
            elif token == "collision":
                if obj.shapes:
                    obj.collision = True
            else:
                raise LoaderError("--UNKNOWN property in property block", reader.line_number)
            token = self._word(reader)

    def _load_arm(self, reader: TokenReader, obj: SceneObject) -> None:
        reader.expect("{")
        right = self._word(reader) == "right"
        self._set_behavior(obj, "arm", right=right, sound=-1)
        obj.settings["sound"] = self._read_sound(reader, "ArmBehavior")
        reader.expect("}")

    def _load_bumper(self, reader: TokenReader, obj: SceneObject) -> None:
        reader.expect("{")
        power = 0.5
        if self.version.compare(0, 3, 0) >= 0:
            power = reader.next_float()
        self._set_behavior(obj, "bumper", power=power, sound=-1)
        obj.settings["sound"] = self._read_sound(reader, "BumperBehavior")
        obj.user_properties |= UserProperty.BUMPER
        self._load_misc(reader, obj, obj)

    def _load_light(self, reader: TokenReader, obj: SceneObject,
                    owner: SceneObject | None) -> None:
        if owner is None:
            raise LoaderError("light outside a behavior", reader.line_number)
        reader.expect("{")
        color = self._triple(reader)
        position = self._triple(reader)
        light = LightSpec(color=color, position=position)
        child = SceneObject(name="#light", translation=position, light=light)
        obj.children.append(child)
        owner.settings["light"] = light
        self._load_misc(reader, child, owner)

    def _load_state_item(self, reader: TokenReader, obj: SceneObject,
                         owner: SceneObject | None) -> None:
        if owner is None or owner.behavior != "state":
            raise LoaderError("Not StateBehavior", reader.line_number)
        reader.expect("{")
        item = StateItem()
        item.act_signal = self.registry.signal_id(self._word(reader))
        item.collision_signal = self.registry.signal_id(self._word(reader))
        item.collision_state = reader.next_int()
        item.delay_state = reader.next_int()
        item.delay = reader.next_int()
        owner.state_items.append(item)
        settings = owner.settings

        token = self._word(reader)
        if token == "move":
            settings["use_move"] = True
            item.move_steps = reader.next_int()
            item.translation = self._triple(reader)
            item.rotation = self._triple(reader)
        elif token != "no_move":
            raise LoaderError("No move field in StateItem", reader.line_number)

        token = self._word(reader)
        if token not in ("light", "no_light"):
            raise LoaderError("No light field in StateItem", reader.line_number)
        item.light = token == "light"

        item.sound = self._read_sound(reader, "StateItem")

        token = self._word(reader)
        if token == "music":
            item.music = self.sounds.load_music(self._data_path(self._word(reader)))
        elif token != "no_music":
            raise LoaderError("No music field in StateItem", reader.line_number)

        if self.version.compare(0, 2, 1) < 0:
            token = self._word(reader)
            if token == "property":
                item.user_property = reader.next_int()
            elif token != "no_property":
                raise LoaderError("No user property field in StateItem", reader.line_number)
        else:
            token = self._word(reader)
            if token == "user_property":
                item.user_property = reader.next_int()
            elif token != "no_user_property":
                raise LoaderError("No user property field in StateItem", reader.line_number)
            token = self._word(reader)
            if token == "shape_property":
                item.shape_property = reader.next_int()
            elif token != "no_shape_property":
                raise LoaderError("No shape property field in StateItem", reader.line_number)

        token = self._word(reader)
        if token == "texcoord":
            settings["use_texcoord"] = True
            count = reader.next_int()
            item.texcoords.extend(
                (reader.next_float(), reader.next_float()) for _ in range(count))
        elif token == "no_texcoord":
            settings["use_texcoord"] = False
        else:
            raise LoaderError("No texcoord field in StateItem", reader.line_number)

        token = self._word(reader)
        if token == "shape":
            settings["use_shape"] = True
            count = reader.next_int()
            item.shape_enable.extend(reader.next_int() == 1 for _ in range(count))
        elif token == "no_shape":
            settings["use_shape"] = False
        else:
            raise LoaderError("No shape field in StateItem", reader.line_number)

        self._load_misc(reader, obj, owner)

    def _load_animation(self, reader: TokenReader, obj: SceneObject) -> None:
        reader.expect("{")
        kind = self._word(reader)
        if kind not in ("rotation", "translation", "light"):
            raise LoaderError("Expecting rotation, translation or light in anim field",
                              reader.line_number)
        step = reader.next_int()
        count = reader.next_int()
        anim = AnimationSpec(kind=kind, step=step)
        for remaining in range(count, 0, -1):
            point = self._triple(reader)
            if remaining == 1:
                anim.end = point
            else:
                anim.points.append(point)
        obj.behavior = "animation"
        obj.settings = {}
        obj.animation = anim
        reader.expect("}")

    def _load_script(self, reader: TokenReader, obj: SceneObject) -> None:
        self.registry.clear()
        reader.expect("{")
        items: list[dict[str, Any]] = []
        token = self._word(reader)
        while token != "}":
            if token != "onsignal":
                raise LoaderError(f"UNKNOWN in script query block {token}", reader.line_number)
            count = reader.next_int()
            query_params = [reader.next_int() for _ in range(count)]
            action = self._word(reader)
            if action not in ("sendsignal", "setvar"):
                raise LoaderError(f"UNKNOWN in script action block {action}",
                                  reader.line_number)
            action_params = [reader.next_int(), reader.next_int()]
            items.append({"query": token, "query_params": query_params,
                          "action": action, "action_params": action_params})
            token = self._word(reader)
        self._set_behavior(obj, "script", items=items)

    def _load_module(self, reader: TokenReader, obj: SceneObject) -> None:
        reader.expect("{")
        filename = f"{self.module_dir}/{self._word(reader)}"
        instance = None
        if self.use_modules:
            if self.modules is None:
                raise LoaderError("Could not allocate behavior object", reader.line_number)
            try:
                instance = self.modules.read(filename)
            except ModuleLoadError as exc:
                raise LoaderError(str(exc), reader.line_number) from exc
        self._set_behavior(obj, "module", filename=filename, instance=instance)
        reader.expect("}")