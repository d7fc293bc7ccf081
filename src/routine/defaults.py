"""Built-in stretching routine used when no routine file is configured."""

from __future__ import annotations

from .constants import SIDES_CUSTOM, SIDES_LEFT_RIGHT, SIDES_NONE
from .definitions import StretchDefinition

DEFAULT_ROUTINE: tuple[StretchDefinition, ...] = (
    StretchDefinition(
        id="supine-spinal-twist",
        name="Supine Spinal Twist",
        description=(
            "Lie on your back, bring one knee across your body, extend opposite "
            "arm out. Look away from the knee."
        ),
        target_areas=("spine", "lower back", "glutes"),
        duration_seconds=60,
        sides=SIDES_LEFT_RIGHT,
    ),
    StretchDefinition(
        id="sitting-forward-bend",
        name="Sitting Forward Bend",
        description=(
            "Sit with legs extended, hinge at hips and reach toward your feet. "
            "Keep spine long."
        ),
        target_areas=("hamstrings", "lower back"),
        duration_seconds=60,
        sides=SIDES_NONE,
    ),
    StretchDefinition(
        id="seated-toe-touch",
        name="Seated Toe Touch",
        description="Sit with legs extended, reach for your toes. Relax your head and neck.",
        target_areas=("hamstrings", "calves"),
        duration_seconds=60,
        sides=SIDES_NONE,
    ),
    StretchDefinition(
        id="standing-hamstring",
        name="Standing Hamstring",
        description=(
            "Stand and place one heel forward on a low surface. Hinge at hips, "
            "keep back straight."
        ),
        target_areas=("hamstrings",),
        duration_seconds=60,
        sides=SIDES_LEFT_RIGHT,
    ),
    StretchDefinition(
        id="half-splits",
        name="Half Splits",
        description=(
            "From kneeling, extend one leg forward with heel down. Hinge forward "
            "over the straight leg."
        ),
        target_areas=("hamstrings", "calves"),
        duration_seconds=60,
        sides=SIDES_LEFT_RIGHT,
    ),
    StretchDefinition(
        id="low-lunge",
        name="Low Lunge",
        description=(
            "Step one foot forward into a lunge, lower back knee to ground. Sink "
            "hips forward and down."
        ),
        target_areas=("hip flexors", "quadriceps"),
        duration_seconds=60,
        sides=SIDES_LEFT_RIGHT,
    ),
    StretchDefinition(
        id="sphinx",
        name="Sphinx",
        description=(
            "Lie face down, prop up on forearms with elbows under shoulders. "
            "Relax your lower back."
        ),
        target_areas=("lower back", "abs"),
        duration_seconds=60,
        sides=SIDES_NONE,
    ),
    StretchDefinition(
        id="downward-dog",
        name="Downward Dog",
        description=(
            "Hands and feet on floor, hips high, forming an inverted V. Press "
            "heels toward ground."
        ),
        target_areas=("hamstrings", "calves", "shoulders"),
        duration_seconds=60,
        sides=SIDES_NONE,
    ),
    StretchDefinition(
        id="plank",
        name="Plank",
        description=(
            "Hold a push-up position with arms straight. Keep body in a straight "
            "line from head to heels."
        ),
        target_areas=("core", "shoulders"),
        duration_seconds=60,
        sides=SIDES_NONE,
    ),
    StretchDefinition(
        id="cat-cow",
        name="Cat/Cow",
        description=(
            "On hands and knees, alternate between arching back up (cat) and "
            "dropping belly down (cow)."
        ),
        target_areas=("spine", "lower back"),
        duration_seconds=30,
        sides=SIDES_CUSTOM,
        side_names=("Cat", "Cow"),
        repetitions=2,
    ),
    StretchDefinition(
        id="childs-pose",
        name="Child's Pose",
        description=(
            "Kneel and sit back on heels, fold forward with arms extended or by "
            "your sides. Rest forehead on ground."
        ),
        target_areas=("lower back", "hips", "shoulders"),
        duration_seconds=60,
        sides=SIDES_NONE,
    ),
)
