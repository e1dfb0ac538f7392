"""Enumerations published by tracking runtimes.

These mirror the runtime's own enums, boundary markers included, so that
schema construction can drop the markers the same way for every runtime.
"""

from __future__ import annotations

import enum


class XRHandBone(enum.IntEnum):
    XRHand_Start = 0
    XRHand_Palm = 0
    XRHand_Wrist = 1
    XRHand_ThumbMetacarpal = 2
    XRHand_ThumbProximal = 3
    XRHand_ThumbDistal = 4
    XRHand_ThumbTip = 5
    XRHand_IndexMetacarpal = 6
    XRHand_IndexProximal = 7
    XRHand_IndexIntermediate = 8
    XRHand_IndexDistal = 9
    XRHand_IndexTip = 10
    XRHand_MiddleMetacarpal = 11
    XRHand_MiddleProximal = 12
    XRHand_MiddleIntermediate = 13
    XRHand_MiddleDistal = 14
    XRHand_MiddleTip = 15
    XRHand_RingMetacarpal = 16
    XRHand_RingProximal = 17
    XRHand_RingIntermediate = 18
    XRHand_RingDistal = 19
    XRHand_RingTip = 20
    XRHand_LittleMetacarpal = 21
    XRHand_LittleProximal = 22
    XRHand_LittleIntermediate = 23
    XRHand_LittleDistal = 24
    XRHand_LittleTip = 25
    XRHand_Max = 26
    XRHand_End = 26


class BodyJoint(enum.IntEnum):
    """Upper-body joints reported by full-body tracking runtimes."""

    Body_Start = 0
    Body_Root = 0
    Body_Hips = 1
    Body_SpineLower = 2
    Body_SpineMiddle = 3
    Body_SpineUpper = 4
    Body_Chest = 5
    Body_Neck = 6
    Body_Head = 7
    Body_LeftShoulder = 8
    Body_LeftScapula = 9
    Body_LeftArmUpper = 10
    Body_LeftArmLower = 11
    Body_LeftHandWristTwist = 12
    Body_RightShoulder = 13
    Body_RightScapula = 14
    Body_RightArmUpper = 15
    Body_RightArmLower = 16
    Body_RightHandWristTwist = 17
    Body_End = 18


class FaceExpression(enum.IntEnum):
    Invalid = -1
    Brow_Lowerer_L = 0
    Brow_Lowerer_R = 1
    Cheek_Puff_L = 2
    Cheek_Puff_R = 3
    Cheek_Raiser_L = 4
    Cheek_Raiser_R = 5
    Cheek_Suck_L = 6
    Cheek_Suck_R = 7
    Chin_Raiser_B = 8
    Chin_Raiser_T = 9
    Dimpler_L = 10
    Dimpler_R = 11
    Eyes_Closed_L = 12
    Eyes_Closed_R = 13
    Eyes_Look_Down_L = 14
    Eyes_Look_Down_R = 15
    Eyes_Look_Left_L = 16
    Eyes_Look_Left_R = 17
    Eyes_Look_Right_L = 18
    Eyes_Look_Right_R = 19
    Eyes_Look_Up_L = 20
    Eyes_Look_Up_R = 21
    Inner_Brow_Raiser_L = 22
    Inner_Brow_Raiser_R = 23
    Jaw_Drop = 24
    Jaw_Sideways_Left = 25
    Jaw_Sideways_Right = 26
    Jaw_Thrust = 27
    Lid_Tightener_L = 28
    Lid_Tightener_R = 29
    Lip_Corner_Depressor_L = 30
    Lip_Corner_Depressor_R = 31
    Lip_Corner_Puller_L = 32
    Lip_Corner_Puller_R = 33
    Lip_Funneler_LB = 34
    Lip_Funneler_LT = 35
    Lip_Funneler_RB = 36
    Lip_Funneler_RT = 37
    Lip_Pressor_L = 38
    Lip_Pressor_R = 39
    Lip_Pucker_L = 40
    Lip_Pucker_R = 41
    Lip_Stretcher_L = 42
    Lip_Stretcher_R = 43
    Lip_Suck_LB = 44
    Lip_Suck_LT = 45
    Lip_Suck_RB = 46
    Lip_Suck_RT = 47
    Lip_Tightener_L = 48
    Lip_Tightener_R = 49
    Lips_Toward = 50
    Lower_Lip_Depressor_L = 51
    Lower_Lip_Depressor_R = 52
    Mouth_Left = 53
    Mouth_Right = 54
    Nose_Wrinkler_L = 55
    Nose_Wrinkler_R = 56
    Outer_Brow_Raiser_L = 57
    Outer_Brow_Raiser_R = 58
    Upper_Lid_Raiser_L = 59
    Upper_Lid_Raiser_R = 60
    Upper_Lip_Raiser_L = 61
    Upper_Lip_Raiser_R = 62
    Tongue_Tip_Interdental = 63
    Tongue_Tip_Alveolar = 64
    Front_Dorsal_Palate = 65
    Mid_Dorsal_Palate = 66
    Back_Dorsal_Velar = 67
    Tongue_Out = 68
    Tongue_Retreat = 69
    Max = 70


class FaceRegion(enum.IntEnum):
    Upper = 0
    Lower = 1
    Max = 2


class TrackedNode(enum.Enum):
    """Device nodes written to the continuous stream, in column order."""

    EyeLeft = "EyeLeft"
    EyeRight = "EyeRight"
    EyeCenter = "EyeCenter"
    Head = "Head"
    HandLeft = "HandLeft"
    HandRight = "HandRight"
    ControllerLeft = "ControllerLeft"
    ControllerRight = "ControllerRight"


class Hand(enum.Enum):
    Left = "Left"
    Right = "Right"


FINGERS = ("Thumb", "Index", "Middle", "Ring", "Pinky")

IMU_CHANNELS = ("ax", "ay", "az", "gx", "gy", "gz", "t_s")
