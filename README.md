# flipperkit

flipperkit contains the game logic of a 3D pinball table. It has no
rendering or audio code of its own. It uses only the standard library.

## What is in it

- `flipperkit.signals`: `SignalRegistry` maps signal and variable names to
  numeric identifiers. It allocates a new identifier the first time it sees a
  name: signals start at 10000 and variables at 20000. The built-in signals
  have fixed identifiers, listed in the `Signal` enum. These include `reset`,
  `tilt`, `game_over`, `game_start` and `game_pause`. `clear()` forgets every
  name the registry has allocated.
- `flipperkit.tokens`: `TokenReader` reads words and numbers from table
  description text and counts lines as it goes. `FileVersion` holds the
  version declared in a file and compares it with another version.
  `LoaderError` is raised for malformed input, and it carries the line number.
- `flipperkit.scene_shapes`: `read_shape` reads a `shape { ... }` chunk into a
  `Shape` made of `Vertex` and `Polygon` objects, with `ShapeProperty` flags.
- `flipperkit.scene`: `SceneLoader` parses a whole table file, through
  `load_file(path)` or `parse(text)`, into `SceneObject` trees. These trees
  carry:
  - transforms, shapes and user properties;
  - behaviour settings (arm, bumper, plunger, state, script, module);
  - `StateItem` lists, `LightSpec` lights and `AnimationSpec` animations.

  The loader sends sound and music names to a `SoundLibrary`. It resolves
  `module` blocks through a `ModuleRegistry`, unless `use_modules` is set to
  false.
- `flipperkit.sound`: `SoundLibrary` caches samples and music by file name,
  plays them by identifier and applies volume settings. The default
  `AudioBackend` makes no sound: it only records what it was asked to play.
  Subclass it to drive a real audio device. `adjust_sound(group)` calls
  `adjust()` on a group's attached sound.
- `flipperkit.behaviors`: `ArmBehavior` (flipper), `BumperBehavior` and the
  `UserProperty` flags.
- `flipperkit.camera`: `Body` (position and rotation) and `EyeBehavior`, which
  handles these:
  - view switching with the F5–F8 keys;
  - nudging and tilt;
  - camera motion that follows the active balls.
- `flipperkit.modules`:
  - `ProfessorBehavior` holds the rules of the professor table: it launches
    balls, counts lost balls and scores bumps.
  - `launch_next_ball` is the ball-launching rule that `ProfessorBehavior`
    uses.
  - `sanitize_path` removes every `../` from a module path.
  - `ModuleRegistry` creates a behaviour from a module file name, using a
    mapping of factories. It raises `ModuleLoadError` for unknown modules.

Behaviours never call an engine directly. Each one receives a `send`
callable and calls `send(signal, delay)` to emit a signal. Keyboard state is
given to them as a `key_down(name)` callable. This means every behaviour can
be driven and tested without a window or a sound card.

## Installation

```
pip install flipperkit
```

To run the test suite, install the `test` extra and run pytest:

```
pip install "flipperkit[test]"
pytest
```

## Example

```python
from flipperkit.signals import SignalRegistry
from flipperkit.scene import SceneLoader
from flipperkit.sound import SoundLibrary, AudioBackend

registry = SignalRegistry()
sounds = SoundLibrary(AudioBackend())
loader = SceneLoader(registry, sounds, "data/professor")
loader.use_modules = False
objects = loader.load_file("data/professor/professor.pbl")

bump = registry.signal_id("bump")
print(registry.signal_name(bump))  # "bump"
```

## What it does not do

- It does not render anything. It opens no window and reads no keyboard or
  joystick. Textures are loaded through a callable that you provide.
- It does not simulate the ball: there is no motion, gravity or collision
  response for the ball.
- It produces no audio unless you supply an `AudioBackend` subclass that
  drives a device.
- The only table rules it includes are those of the professor table.
- It has no command-line program. You use it as a library.