# liveascii

`liveascii` animates layered 2D character models. A model is a set of named
parameters and parts. The package reads the JSON files that describe a model and
its animations, and drives those parameters and part opacities over time.

## Modules

- **`liveascii.model_setting`**: `ModelSetting.from_path` reads a
  `*.model3.json` file, and `ModelSetting.from_dict` builds one from decoded
  JSON. It gives access to:
  - the file references: moc, textures, physics, pose, expressions and motions;
  - motion groups and their fade times;
  - hit areas;
  - the `EyeBlink` and `LipSync` parameter groups, through
    `get_eye_blink_parameter_ids` and `get_lip_sync_parameter_ids`.
- **`liveascii.model`**: `Model` holds parameter values and part opacities. It is
  built from a list of `ParameterSpec`s (id, minimum, maximum, default, repeat)
  and a list of part ids.
  - Parameter values are clamped to their range. Repeating parameters wrap
    around instead.
  - Ids the model does not know get virtual indices. Their values are kept
    aside and are never clamped.
  - `save_parameters` and `load_parameters` store and restore the current
    values.
- **`liveascii.motion_json`**: `MotionData.from_path` parses a
  `*.motion3.json` file into flat lists of curves, segments and points. The
  segments can be linear, Bezier, stepped or inverse-stepped. Malformed data
  raises `MotionFormatError`.
- **`liveascii.amotion`**: `CubismMotion` evaluates motion curves, applying
  fade-in, fade-out and looping. It can also drive the eye-blink and lip-sync
  parameters through `set_effect_ids`. Its user-data events are returned by
  `get_fired_events`. The module also provides the curve helpers
  `evaluate_curve`, `linear_evaluate`, `bezier_evaluate` and `get_easing_sine`.
- **`liveascii.queue`**: `MotionQueueManager` plays queued motions. When a new
  motion starts, the older ones fade out, and finished entries are dropped. If
  an `event_callback` is set, it receives every fired event.
- **`liveascii.motion_manager`**: `MotionManager` starts motions with a priority
  (`start_motion_priority`). It reserves priorities with `reserve_motion` and
  advances time with `update_motion`.
- **`liveascii.expression`**: `ExpMotion.from_path` loads a `*.exp3.json` file.
  Each parameter entry uses Add, Multiply or Overwrite blending. An unknown
  blend name counts as Add.
- **`liveascii.expression_manager`**: `ExpressionManager.start_expression`
  queues an expression. `update_motion` blends all queued expressions into
  shared values and writes them to the model. Once the newest expression is
  fully faded in, the older ones are dropped.
- **`liveascii.pose`**: `Pose.from_path` loads a `*.pose3.json` file.
  - `reset` shows the first part of each group.
  - `update_parameters` cross-fades to the part whose parameter is set, and
    copies opacities to linked parts.
- **`liveascii.eye_blink`**: `EyeBlink` runs a blink cycle at random intervals.
  `EyeBlink.from_model_setting` uses the model's `EyeBlink` group.
- **`liveascii.controller`**: `FaceController` maps a tracking packet to head,
  body, eye and mouth parameters, with smoothing.
  - The packet is any object with a `quaternion` (x, y, z, w) and the
    eye and mouth fields.
  - `quaternion_from_euler_xyz` and `quaternion_to_euler_xyz` convert between
    quaternions and XYZ Euler angles.
- **`liveascii.live_json`**: `Live.from_path` reads a `*.live.json` hotkey file.
  `Live.handle_hotkeys` adds an `Action` to a list for every matching hotkey,
  and skips actions that are already queued.
- **`liveascii.geometry`**: `Triangle` gives its bounding box (`get_box`) and its
  signed area in the xy plane.

## Example

```python
from liveascii.amotion import CubismMotion
from liveascii.model import Model, ParameterSpec
from liveascii.model_setting import ModelSetting
from liveascii.motion_json import MotionData
from liveascii.motion_manager import MotionManager

setting = ModelSetting.from_path("model/model.model3.json")
print(setting.get_motion_group_names())

model = Model([ParameterSpec("ParamAngleX", -30.0, 30.0)])
motion = CubismMotion(MotionData.from_path("model", "idle.motion3.json"))

manager = MotionManager()
manager.start_motion_priority(motion, False, 1)
manager.update_motion(model, 1 / 30)
print(model.get_all_parameters())
```

## What it does not do

The package only handles animation state. It does not do the following:

- read binary `.moc3` model data or load textures;
- simulate physics;
- render the model to a terminal or anywhere else;
- read a camera or receive tracking packets over a network.

It provides no command-line program. Callers build a `Model` from their own
parameter and part lists and read the values back from it.

## Installing and testing

```
pip install .
pip install ".[test]"
pytest
```