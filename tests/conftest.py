"""
Pytest configuration and fixtures for motion_fk tests.
"""

import pytest

from motion_fk.acclaim import parse_amc, parse_asf


SAMPLE_ASF = """\
# sample skeleton
:version 1.10
:name VICON
:units
  mass 1.0
  length 0.45
  angle deg
:documentation
   Example skeleton
   second line
:root
   order TX TY TZ RX RY RZ
   axis XYZ
   position 0 0 0
   orientation 0 0 0
:bonedata
  begin
     id 1
     name lhipjoint
     direction 1 0 0
     length 2
     axis 0 0 20 XYZ
  end
  begin
     id 2
     name lfemur
     direction 0 -1 0
     length 7
     axis 0 0 20 XYZ
     dof rx ry rz
     limits (-160.0 20.0)
            (-70.0 70.0)
            (-60.0 70.0)
  end
  begin
     id 3
     name lowerback
     direction 0 1 0
     length 2
     axis 10 -5 0 ZYX
     dof rx ry rz
     limits (-20 20) (-20 20) (-20 20)
  end
  begin
     id 4
     name lhumerus
     direction 1 0 0
     length 5
     axis 0 0 90 XYZ
     dof rx ry rz
  end
:hierarchy
  begin
    root lhipjoint lowerback
    lhipjoint lfemur
    lowerback lhumerus
  end
"""

SAMPLE_AMC = """\
#!OML:ASF sample.asf
:FULLY-SPECIFIED
:DEGREES
1
root 0 0 0 0 0 0
lfemur 10 0 0
lowerback 0 0 0
lhumerus 0 0 30
2
root 1 2 3 0 0 0
lfemur 20 5 0
lowerback 5 0 0
lhumerus 0 0 45
"""

# Same shape as the sample, but without axis fields.
PLAIN_ASF = """\
:root
   order TX TY TZ RX RY RZ
   position 1 2 3
:bonedata
  begin
     name hips
     direction 0 1 0
     length 2
     dof rx ry rz
  end
  begin
     name spine
     direction 0.6 0.8 0
     length 5
     dof rz
  end
  begin
     name leg
     direction 0 -1 0
     length 4
     dof rx
  end
:hierarchy
  begin
    root hips leg
    hips spine
  end
"""


@pytest.fixture
def sample_asf_text():
    return SAMPLE_ASF


@pytest.fixture
def sample_amc_text():
    return SAMPLE_AMC


@pytest.fixture
def sample_skeleton():
    return parse_asf(SAMPLE_ASF)


@pytest.fixture
def sample_frames(sample_skeleton):
    return parse_amc(SAMPLE_AMC, sample_skeleton)


@pytest.fixture
def plain_skeleton():
    """Skeleton without any axis fields."""
    return parse_asf(PLAIN_ASF)
