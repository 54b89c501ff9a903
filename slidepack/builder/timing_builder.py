"""Build the ``p:timing`` graph that reveals text paragraph by paragraph."""
from __future__ import annotations

from typing import List, Optional, Sequence
from xml.etree import ElementTree as ET

from slidepack.model.elements import TimingStep
from slidepack.utils.xml_utils import make_element, sub_element

FADE_PRESET_ID = "10"


class _TimeNodeIds:
    """Sequential ``cTn`` ids, scoped to a single timing graph."""

    def __init__(self) -> None:
        self._next = 1

    def next(self) -> str:
        value = self._next
        self._next += 1
        return str(value)


class TimingBuilder:
    """Turns an ordered list of reveal steps into a PresentationML timing tree.

    All steps live in one click group. The first step starts on the click,
    every following step starts when the previous one has finished, and
    each step holds its end state for the rest of the slide.
    """

    def __init__(self, reveal_duration_ms: int = 500) -> None:
        self._duration = reveal_duration_ms

    def build(self, steps: Sequence[TimingStep]) -> Optional[ET.Element]:
        """Return the ``p:timing`` element, or ``None`` when there is nothing to reveal."""
        if not steps:
            return None

        ids = _TimeNodeIds()
        timing = make_element("p:timing")
        root_par = sub_element(sub_element(timing, "p:tnLst"), "p:par")
        root_ctn = sub_element(root_par, "p:cTn", id=ids.next(), dur="indefinite", restart="never", nodeType="tmRoot")
        seq = sub_element(sub_element(root_ctn, "p:childTnLst"), "p:seq", concurrent="1", nextAc="seek")
        main_ctn = sub_element(seq, "p:cTn", id=ids.next(), dur="indefinite", nodeType="mainSeq")

        click_par = sub_element(sub_element(main_ctn, "p:childTnLst"), "p:par")
        click_ctn = sub_element(click_par, "p:cTn", id=ids.next(), fill="hold")
        self._start_condition(click_ctn, "indefinite")
        click_children = sub_element(click_ctn, "p:childTnLst")

        for index, step in enumerate(steps):
            self._append_step(click_children, ids, index, step)

        self._navigation_conditions(seq)
        self._build_list(timing, steps)
        return timing

    def _append_step(self, parent: ET.Element, ids: _TimeNodeIds, index: int, step: TimingStep) -> None:
        offset_par = sub_element(parent, "p:par")
        offset_ctn = sub_element(offset_par, "p:cTn", id=ids.next(), fill="hold")
        self._start_condition(offset_ctn, str(index * self._duration))

        effect_par = sub_element(sub_element(offset_ctn, "p:childTnLst"), "p:par")
        effect_ctn = sub_element(
            effect_par,
            "p:cTn",
            id=ids.next(),
            presetID=FADE_PRESET_ID,
            presetClass="entr",
            presetSubtype="0",
            fill="hold",
            grpId="0",
            nodeType="clickEffect" if index == 0 else "afterEffect",
        )
        self._start_condition(effect_ctn, "0")
        behaviours = sub_element(effect_ctn, "p:childTnLst")

        visibility = sub_element(behaviours, "p:set")
        behaviour = sub_element(visibility, "p:cBhvr")
        set_ctn = sub_element(behaviour, "p:cTn", id=ids.next(), dur="1", fill="hold")
        self._start_condition(set_ctn, "0")
        self._target(behaviour, step)
        attr_names = sub_element(behaviour, "p:attrNameLst")
        sub_element(attr_names, "p:attrName").text = "style.visibility"
        sub_element(sub_element(visibility, "p:to"), "p:strVal", val="visible")

        fade = sub_element(behaviours, "p:animEffect", transition="in", filter="fade")
        fade_behaviour = sub_element(fade, "p:cBhvr")
        sub_element(fade_behaviour, "p:cTn", id=ids.next(), dur=str(self._duration))
        self._target(fade_behaviour, step)

    @staticmethod
    def _start_condition(ctn: ET.Element, delay: str) -> None:
        sub_element(sub_element(ctn, "p:stCondLst"), "p:cond", delay=delay)

    @staticmethod
    def _target(behaviour: ET.Element, step: TimingStep) -> None:
        shape_target = sub_element(sub_element(behaviour, "p:tgtEl"), "p:spTgt", spid=str(step.shape_id))
        start, end = step.paragraphs
        sub_element(sub_element(shape_target, "p:txEl"), "p:pRg", st=str(start), end=str(end))

    @staticmethod
    def _navigation_conditions(seq: ET.Element) -> None:
        for list_tag, event in (("p:prevCondLst", "onPrev"), ("p:nextCondLst", "onNext")):
            cond = sub_element(sub_element(seq, list_tag), "p:cond", evt=event, delay="0")
            sub_element(sub_element(cond, "p:tgtEl"), "p:sldTgt")

    @staticmethod
    def _build_list(timing: ET.Element, steps: Sequence[TimingStep]) -> None:
        build_list = sub_element(timing, "p:bldLst")
        seen: List[int] = []
        for step in steps:
            if step.shape_id in seen:
                continue
            seen.append(step.shape_id)
            sub_element(build_list, "p:bldP", spid=str(step.shape_id), grpId="0", build="p")
