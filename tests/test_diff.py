"""Tests for the semantic plan diff."""

from liftplan.models.plan import (
    Exercise,
    ExerciseSet,
    ProgressionKind,
    ProgressionRule,
    ProgressionStep,
    SetGroup,
    Tempo,
)
from liftplan.services.diff import (
    ChangeAction,
    ChangeDetail,
    NodeKind,
    diff_programs,
    format_change,
    format_value,
)
from liftplan.services.expansion import expand


def squat(program):
    return program.weeks[0].days[0].exercises[0]


MIRRORED_ACTIONS = {
    ChangeAction.ADDED: ChangeAction.REMOVED,
    ChangeAction.REMOVED: ChangeAction.ADDED,
    ChangeAction.MODIFIED: ChangeAction.MODIFIED,
}


def assert_mirrored(older, newer):
    """Check diff(older, newer) and diff(newer, older) describe the same changes reversed."""
    forward = diff_programs(older, newer)
    backward = {c.id: c for c in diff_programs(newer, older)}

    assert forward
    assert {c.id for c in forward} == backward.keys()
    for change in forward:
        mirror = backward[change.id]
        assert mirror.action == MIRRORED_ACTIONS[change.action]
        assert {d.label: (d.from_value, d.to_value) for d in change.details} == {
            d.label: (d.to_value, d.from_value) for d in mirror.details
        }
    return forward


class TestDiffPrograms:
    """Tests for diff_programs."""

    def test_identical(self, sample_program, edited_program):
        """Test equal plans produce no records."""
        assert diff_programs(sample_program, edited_program) == []

    def test_set_count_change(self, sample_program, edited_program):
        """Test a count change yields one record on the exercise."""
        squat(edited_program).set_groups[0].count = 5

        changes = diff_programs(sample_program, edited_program)

        assert len(changes) == 1
        change = changes[0]
        assert change.id == "program/week:1/day:1/exercise:ex_squat"
        assert change.action == ChangeAction.MODIFIED
        assert change.entity.type == NodeKind.EXERCISE
        assert change.entity.name == "Squat"
        assert change.entity.parent_name == "Week 1 / Lower"
        assert change.details == [ChangeDetail("count", 3, 5)]
        assert change.description == "Updated Squat"

    def test_exercise_added(self, sample_program, edited_program):
        """Test a new exercise is reported as added with its context."""
        edited_program.weeks[0].days[0].exercises.append(
            Exercise(id="ex_lunge", name="Lunges", set_groups=[SetGroup.create(ExerciseSet(reps=10))])
        )

        changes = diff_programs(sample_program, edited_program)

        assert len(changes) == 1
        assert changes[0].action == ChangeAction.ADDED
        assert changes[0].id == "program/week:1/day:1/exercise:ex_lunge"
        assert changes[0].entity.name == "Lunges"
        assert changes[0].entity.parent_name == "Week 1 / Lower"
        assert changes[0].details == []

    def test_meal_removed(self, sample_program, edited_program):
        """Test a removed meal is reported once."""
        edited_program.weeks[1].days[1].meals.clear()

        changes = diff_programs(sample_program, edited_program)

        assert [(c.id, c.action) for c in changes] == [
            ("program/week:2/day:2/meal:meal_post", ChangeAction.REMOVED)
        ]
        assert changes[0].entity.parent_name == "Week 2 / Upper"
        assert changes[0].description == "Removed Post-workout"

    def test_symmetry(self, sample_program, edited_program):
        """Test swapping sides swaps added and removed and every from/to pair."""
        edited_program.weeks[0].days[0].exercises.append(
            Exercise(id="ex_lunge", name="Lunges")
        )
        squat(edited_program).set_groups[0].count = 4
        edited_program.weeks[1].days[1].meals[0].calories = 650

        assert_mirrored(sample_program, edited_program)

    def test_symmetry_with_reordered_groups(self, sample_program, edited_program):
        """Test a moved and edited group gets the same label in both directions."""
        for program in (sample_program, edited_program):
            squat(program).set_groups.append(
                SetGroup(id="sg_backoff", count=2, base_set=ExerciseSet(reps=8, weight=80.0))
            )
        groups = squat(edited_program).set_groups
        groups.reverse()
        groups[0].count = 4

        forward = assert_mirrored(sample_program, edited_program)

        assert forward[0].details == [ChangeDetail("Set Group 1 › count", 2, 4)]

    def test_symmetry_with_renumbered_sets(self, sample_program, edited_program):
        """Test realized sets appearing and disappearing mirror each other."""
        for program in (sample_program, edited_program):
            group = squat(program).set_groups[0]
            group.sets = expand(group)
        squat(edited_program).set_groups[0].sets[2].set_number = 4

        forward = assert_mirrored(sample_program, edited_program)

        assert forward[0].details == [
            ChangeDetail("Set 3", "5 @ 100kg", None),
            ChangeDetail("Set 4", None, "5 @ 100kg"),
        ]

    def test_week_fields(self, sample_program, edited_program):
        """Test week-level field changes."""
        edited_program.weeks[1].name = "Deload"
        edited_program.weeks[1].deload = True

        changes = diff_programs(sample_program, edited_program)

        assert len(changes) == 1
        assert changes[0].id == "program/week:2"
        assert changes[0].entity.name == "Deload"
        assert changes[0].entity.parent_name == "Strength Block"
        assert ChangeDetail("deload", False, True) in changes[0].details

    def test_records_in_tree_order(self, sample_program, edited_program):
        """Test records come out top-down."""
        edited_program.name = "Block 2"
        edited_program.weeks[1].days[1].exercises[0].name = "Bench"
        squat(edited_program).notes = "Low bar"

        ids = [c.id for c in diff_programs(sample_program, edited_program)]

        assert ids == [
            "program",
            "program/week:1/day:1/exercise:ex_squat",
            "program/week:2/day:2/exercise:ex_bench",
        ]


class TestSetGroupFolding:
    """Tests for set-group and set changes folded into exercises."""

    def test_multiple_groups_are_prefixed(self, sample_program, edited_program):
        """Test labels name the group when an exercise has several."""
        for program in (sample_program, edited_program):
            squat(program).set_groups.append(
                SetGroup(id="sg_backoff", count=2, base_set=ExerciseSet(reps=8, weight=80.0))
            )
        squat(edited_program).set_groups[1].count = 3

        changes = diff_programs(sample_program, edited_program)

        assert changes[0].details == [ChangeDetail("Set Group 2 › count", 2, 3)]

    def test_group_added(self, sample_program, edited_program):
        """Test a new group is summarized."""
        squat(edited_program).set_groups.append(
            SetGroup(id="sg_top", count=1, base_set=ExerciseSet(reps=3, weight=120.0))
        )

        changes = diff_programs(sample_program, edited_program)

        assert changes[0].details == [ChangeDetail("Set Group 2", None, "1x3 @ 120kg")]

    def test_base_set_and_tempo(self, sample_program, edited_program):
        """Test base-set fields and tempo phases get their own labels."""
        squat(sample_program).set_groups[0].base_set.tempo = Tempo(2, 0, 1, 0)
        base = squat(edited_program).set_groups[0].base_set
        base.tempo = Tempo(3, 0, 1, 0)
        base.reps = 3

        labels = [d.label for d in diff_programs(sample_program, edited_program)[0].details]

        assert labels == ["reps", "tempo.eccentric"]

    def test_progression_added(self, sample_program, edited_program):
        """Test a new progression rule is described step by step."""
        squat(edited_program).set_groups[0].progression = ProgressionRule(
            kind=ProgressionKind.LINEAR, steps=[ProgressionStep(2, 3, 5)]
        )

        details = diff_programs(sample_program, edited_program)[0].details

        assert details == [
            ChangeDetail("progression", None, "linear"),
            ChangeDetail("progression step 1", None, "sets 2-3: +5"),
        ]

    def test_individual_set_edit(self, sample_program, edited_program):
        """Test realized set edits are reported per set."""
        for program in (sample_program, edited_program):
            group = squat(program).set_groups[0]
            group.sets = expand(group)
        squat(edited_program).set_groups[0].sets[1].weight = 110.0

        changes = diff_programs(sample_program, edited_program)

        assert len(changes) == 1
        assert changes[0].details == [ChangeDetail("Set 2 › weight", 100.0, 110.0)]

    def test_stale_cache_is_not_a_change(self, sample_program, edited_program):
        """Test filling in the realized sets alone is not reported."""
        group = squat(edited_program).set_groups[0]
        group.sets = expand(group)

        assert diff_programs(sample_program, edited_program) == []


class TestUnkeyed:
    """Tests for entities without identity keys."""

    def _plan(self, exercises):
        return {
            "name": "Plan",
            "weeks": [{"week_number": 1, "days": [{"day_number": 1, "name": "A", "exercises": exercises}]}],
        }

    def test_unchanged_unkeyed_paired(self):
        """Test identical unkeyed items are not reported."""
        old = self._plan([{"name": "Plank"}])
        new = self._plan([{"name": "Plank"}, {"name": "Crunch"}])

        changes = diff_programs(old, new)

        assert [(c.id, c.action) for c in changes] == [
            ("program/week:1/day:1/exercise:#1", ChangeAction.ADDED)
        ]
        assert changes[0].entity.name == "Crunch"

    def test_edited_unkeyed_is_remove_and_add(self):
        """Test an edited unkeyed item cannot be matched."""
        old = self._plan([{"name": "Plank", "notes": ""}])
        new = self._plan([{"name": "Plank", "notes": "60s"}])

        actions = sorted(c.action.value for c in diff_programs(old, new))

        assert actions == ["added", "removed"]


class TestFormatting:
    """Tests for rendering records."""

    def test_format_modified(self, sample_program, edited_program):
        """Test the one-line modified form."""
        squat(edited_program).set_groups[0].count = 5

        line = format_change(diff_programs(sample_program, edited_program)[0])

        assert line == "~ Week 1 / Lower / Squat: count 3 → 5"

    def test_format_added(self, sample_program, edited_program):
        """Test the one-line added form."""
        edited_program.weeks[0].days[0].exercises.append(Exercise(id="ex_lunge", name="Lunges"))

        line = format_change(diff_programs(sample_program, edited_program)[0])

        assert line == "+ Week 1 / Lower / Lunges"

    def test_format_value(self):
        """Test value rendering."""
        assert format_value(None) == "(empty)"
        assert format_value(True) == "Yes"
        assert format_value(100.0) == "100"
        assert format_value("Low bar") == '"Low bar"'
        assert format_value("x" * 40) == '"' + "x" * 27 + '..."'

    def test_record_to_dict(self, sample_program, edited_program):
        """Test JSON-ready output."""
        squat(edited_program).set_groups[0].count = 5

        data = diff_programs(sample_program, edited_program)[0].to_dict()

        assert data["action"] == "modified"
        assert data["entity"] == {"type": "exercise", "name": "Squat", "parent_name": "Week 1 / Lower"}
        assert data["details"] == [{"label": "count", "from": 3, "to": 5}]


class TestMalformedInput:
    """Tests for plan data that does not match the expected shapes."""

    def test_non_dict_tempo(self, sample_program):
        """Test a tempo given as a list does not stop the diff."""
        older = sample_program.to_dict()
        newer = sample_program.to_dict()
        base = newer["weeks"][0]["days"][0]["exercises"][0]["set_groups"][0]["base_set"]
        base["tempo"] = [3, 0, 1, 0]
        base["notes"] = "Belt"

        changes = diff_programs(older, newer)

        assert len(changes) == 1
        assert changes[0].details == [ChangeDetail("notes", "", "Belt")]
        assert diff_programs(newer, older)[0].details == [ChangeDetail("notes", "Belt", "")]
