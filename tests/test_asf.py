"""
Tests for the skeleton definition (ASF) parser.

Run with: pytest tests/test_asf.py -v
"""

import pytest

from motion_fk.acclaim import BoneAxis, Limit, ParseError, parse_asf


class TestSections:
    """Header and scalar sections."""

    def test_inline_header_values(self, sample_skeleton):
        """`:version 1.10` and `:name VICON` carry their value inline."""
        assert sample_skeleton.version == "1.10"
        assert sample_skeleton.name == "VICON"

    def test_body_line_scalar_last_wins(self):
        """Scalar sections take the last body line."""
        sk = parse_asf(":version\n1.0\n1.10\n:name\nfirst\nsecond\n")
        assert sk.version == "1.10"
        assert sk.name == "second"

    def test_units(self, sample_skeleton):
        assert sample_skeleton.units == {"mass": "1.0", "length": "0.45", "angle": "deg"}

    def test_units_single_token_ignored(self):
        sk = parse_asf(":units\nangle\nlength 1\n")
        assert sk.units == {"length": "1"}

    def test_documentation_newline_joined(self, sample_skeleton):
        assert sample_skeleton.documentation == "Example skeleton\nsecond line"

    def test_root_entries_are_token_lists(self, sample_skeleton):
        root = sample_skeleton.root
        assert root["order"] == ["TX", "TY", "TZ", "RX", "RY", "RZ"]
        assert root["axis"] == ["XYZ"]
        assert root["position"] == ["0", "0", "0"]
        assert root["orientation"] == ["0", "0", "0"]

    def test_unrecognised_section_body_ignored(self):
        sk = parse_asf(":custom\nfoo bar\n:name\nbob\n")
        assert sk.name == "bob"
        assert sk.units == {}

    def test_comments_and_blank_lines_skipped(self):
        sk = parse_asf("\n# comment\n:name\n\n# another\nbob\n")
        assert sk.name == "bob"

    def test_missing_sections_default(self):
        sk = parse_asf("")
        assert sk.version == ""
        assert sk.documentation == ""
        assert sk.root == {}
        assert sk.bones == {}
        assert sk.hierarchy == {}


class TestBonedata:
    """Bone records."""

    def test_bones_parsed(self, sample_skeleton):
        assert list(sample_skeleton.bones) == ["lhipjoint", "lfemur", "lowerback", "lhumerus"]

    def test_bone_fields(self, sample_skeleton):
        femur = sample_skeleton.bones["lfemur"]
        assert femur.id == 2
        assert femur.name == "lfemur"
        assert femur.direction == (0.0, -1.0, 0.0)
        assert femur.length == 7.0
        assert femur.axis == BoneAxis(angles=(0.0, 0.0, 20.0), order="xyz")
        assert femur.dof == ["rx", "ry", "rz"]

    def test_bone_without_axis_or_dof(self):
        sk = parse_asf(":bonedata\nbegin\nname a\nlength 1\nend\n")
        bone = sk.bones["a"]
        assert bone.axis is None
        assert bone.dof == []
        assert bone.limits == []
        assert bone.direction == (0.0, 0.0, 0.0)

    def test_limits_merged_across_lines(self, sample_skeleton):
        """Pairs on continuation lines join the same limits list."""
        assert sample_skeleton.bones["lfemur"].limits == [
            Limit(-160.0, 20.0),
            Limit(-70.0, 70.0),
            Limit(-60.0, 70.0),
        ]

    def test_limits_on_one_line(self, sample_skeleton):
        assert sample_skeleton.bones["lowerback"].limits == [Limit(-20, 20)] * 3

    def test_limits_two_lines(self):
        sk = parse_asf(":bonedata\nbegin\nname a\ndof rx ry\nlimits (-90 90)\n(-45 45)\nend\n")
        assert sk.bones["a"].limits == [Limit(min=-90.0, max=90.0), Limit(min=-45.0, max=45.0)]

    def test_limits_accept_infinity(self):
        sk = parse_asf(":bonedata\nbegin\nname a\nlimits (-inf inf)\nend\n")
        lim = sk.bones["a"].limits[0]
        assert lim.min == float("-inf")
        assert lim.max == float("inf")

    def test_record_without_name_dropped(self):
        sk = parse_asf(":bonedata\nbegin\nid 1\nlength 2\nend\nbegin\nname b\nend\n")
        assert list(sk.bones) == ["b"]

    def test_begin_inside_open_record_starts_fresh(self):
        sk = parse_asf(":bonedata\nbegin\nname a\nbegin\nname b\nend\n")
        assert list(sk.bones) == ["b"]

    def test_unclosed_record_dropped(self):
        sk = parse_asf(":bonedata\nbegin\nname a\n")
        assert sk.bones == {}

    def test_axis_order_case_insensitive(self):
        sk = parse_asf(":bonedata\nbegin\nname a\naxis 1 2 3 zX\nend\n")
        assert sk.bones["a"].axis.order == "zx"


class TestHierarchy:
    """Hierarchy section."""

    def test_hierarchy(self, sample_skeleton):
        assert sample_skeleton.hierarchy == {
            "root": ["lhipjoint", "lowerback"],
            "lhipjoint": ["lfemur"],
            "lowerback": ["lhumerus"],
        }

    def test_duplicate_parent_overwrites(self):
        sk = parse_asf(":hierarchy\nbegin\nroot a b\nroot c\nend\n")
        assert sk.hierarchy == {"root": ["c"]}


class TestParseErrors:
    """Structural and numeric failures."""

    @pytest.mark.parametrize("order", ["xyw", "xyzx", "1", "xx", "zZz", "xyx"])
    def test_invalid_axis_order(self, order):
        with pytest.raises(ParseError) as exc:
            parse_asf(f":bonedata\nbegin\nname a\naxis 0 0 0 {order}\nend\n")
        assert exc.value.line == 4

    def test_axis_missing_order(self):
        with pytest.raises(ParseError):
            parse_asf(":bonedata\nbegin\nname a\naxis 0 0 0\nend\n")

    def test_non_numeric_direction(self):
        with pytest.raises(ParseError) as exc:
            parse_asf(":bonedata\nbegin\nname a\ndirection 0 x 1\nend\n")
        assert exc.value.line == 4
        assert "direction" in exc.value.reason

    def test_short_direction(self):
        with pytest.raises(ParseError):
            parse_asf(":bonedata\nbegin\nname a\ndirection 0 1\nend\n")

    def test_non_numeric_length(self):
        with pytest.raises(ParseError):
            parse_asf(":bonedata\nbegin\nname a\nlength abc\nend\n")

    def test_non_integer_id(self):
        with pytest.raises(ParseError):
            parse_asf(":bonedata\nbegin\nid 1.5\nname a\nend\n")

    def test_non_numeric_limit(self):
        with pytest.raises(ParseError):
            parse_asf(":bonedata\nbegin\nname a\nlimits (lo 1)\nend\n")

    @pytest.mark.parametrize(
        "field_line", ["direction nan 0 1", "length nan", "axis 0 NaN 0 xyz", "limits (nan 1)"]
    )
    def test_nan_rejected(self, field_line):
        with pytest.raises(ParseError) as exc:
            parse_asf(f":bonedata\nbegin\nname a\n{field_line}\nend\n")
        assert exc.value.line == 4

    def test_nan_root_position_rejected(self):
        with pytest.raises(ParseError):
            parse_asf(":root\nposition 0 nan 0\n")

    @pytest.mark.parametrize("limits", ["limits (1)", "limits (-90 90) (1 2 3)", "limits ()"])
    def test_malformed_limit_pair(self, limits):
        with pytest.raises(ParseError) as exc:
            parse_asf(f":bonedata\nbegin\nname a\n{limits}\nend\n")
        assert exc.value.line == 4

    def test_malformed_limit_continuation(self):
        with pytest.raises(ParseError) as exc:
            parse_asf(":bonedata\nbegin\nname a\nlimits (-90 90)\n(45)\nend\n")
        assert exc.value.line == 5

    def test_non_numeric_root_position(self):
        with pytest.raises(ParseError) as exc:
            parse_asf(":root\nposition 0 zero 0\n")
        assert exc.value.line == 2

    def test_bonedata_end_without_begin(self):
        with pytest.raises(ParseError) as exc:
            parse_asf(":bonedata\nend\n")
        assert exc.value.line == 2

    def test_hierarchy_end_without_begin(self):
        with pytest.raises(ParseError):
            parse_asf(":hierarchy\nroot a\nend\n")

    def test_error_message_has_line(self):
        with pytest.raises(ParseError, match="line 2"):
            parse_asf(":bonedata\nend\n")


class TestIdempotence:

    def test_parse_twice_equal(self, sample_asf_text):
        assert parse_asf(sample_asf_text) == parse_asf(sample_asf_text)
