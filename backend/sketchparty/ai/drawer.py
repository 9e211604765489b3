"""Line-drawing templates played back by the synthetic drawer.

Each template receives a :class:`StrokeBuilder` centred on a 640x480 canvas
and emits pen changes and point samples. Output is deterministic per word.
"""

from __future__ import annotations

import math
from typing import Callable

from ..game.models import StrokeEvent

CANVAS_WIDTH = 640
CANVAS_HEIGHT = 480
BASE_COLOR = "#3b82f6"
LINE_WIDTH = 7


class StrokeBuilder:
    def __init__(self, width: int = CANVAS_WIDTH, height: int = CANVAS_HEIGHT) -> None:
        self.cx = width / 2
        self.cy = height / 2
        self.color = BASE_COLOR
        self.events: list[StrokeEvent] = []

    def set_color(self, color: str | None) -> None:
        self.color = color or BASE_COLOR

    def pen_up(self) -> None:
        self.events.append(StrokeEvent(kind="penUp"))

    def pen_down(self) -> None:
        self.events.append(StrokeEvent(kind="penDown"))

    def point(self, x: float, y: float) -> None:
        self.events.append(
            StrokeEvent(kind="draw", x=round(x, 2), y=round(y, 2), color=self.color, stroke_width=LINE_WIDTH)
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, steps: int = 24) -> None:
        for i in range(steps + 1):
            t = i / steps
            self.point(x1 + (x2 - x1) * t, y1 + (y2 - y1) * t)

    def rect(self, x: float, y: float, w: float, h: float) -> None:
        self.line(x, y, x + w, y)
        self.line(x + w, y, x + w, y + h)
        self.line(x + w, y + h, x, y + h)
        self.line(x, y + h, x, y)

    def ellipse(self, xc: float, yc: float, rx: float, ry: float, segments: int = 32) -> None:
        prev_x, prev_y = xc + rx, yc
        for i in range(1, segments + 1):
            a = 2 * math.pi * i / segments
            x, y = xc + rx * math.cos(a), yc + ry * math.sin(a)
            self.line(prev_x, prev_y, x, y, steps=1)
            prev_x, prev_y = x, y

    def circle(self, xc: float, yc: float, r: float, segments: int = 32) -> None:
        self.ellipse(xc, yc, r, r, segments)

    def arc(self, xc: float, yc: float, r: float, start: float, end: float, segments: int = 24) -> None:
        prev_x, prev_y = xc + r * math.cos(start), yc + r * math.sin(start)
        for i in range(1, segments + 1):
            t = start + (end - start) * i / segments
            x, y = xc + r * math.cos(t), yc + r * math.sin(t)
            self.line(prev_x, prev_y, x, y, steps=1)
            prev_x, prev_y = x, y

    def wavy_line(self, x1: float, y1: float, x2: float, y2: float, waves: int = 4, amplitude: float = 15) -> None:
        steps = 80
        for i in range(steps + 1):
            t = i / steps
            y_base = y1 + (y2 - y1) * t
            self.point(x1 + (x2 - x1) * t, y_base + math.sin(t * waves * math.pi * 2) * amplitude)

    def stroke(self, draw: Callable[[], None]) -> None:
        """One continuous pen-down segment."""
        self.pen_down()
        draw()
        self.pen_up()


def _sun(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.set_color("#facc15")
    b.pen_up()
    b.stroke(lambda: b.circle(cx, cy, 40))
    b.set_color("#f97316")
    for i in range(8):
        a = 2 * math.pi * i / 8
        b.stroke(lambda a=a: b.line(cx + 40 * math.cos(a), cy + 40 * math.sin(a), cx + 70 * math.cos(a), cy + 70 * math.sin(a)))


def _moon(b: StrokeBuilder) -> None:
    b.set_color("#e5e7eb")
    b.pen_up()
    b.stroke(lambda: b.circle(b.cx, b.cy, 80))


def _ball(b: StrokeBuilder) -> None:
    b.set_color("#ef4444")
    b.pen_up()
    b.stroke(lambda: b.circle(b.cx, b.cy, 45))


def _pizza(b: StrokeBuilder) -> None:
    cx, cy, r = b.cx, b.cy, 80
    tip, left, right = (cx, cy - r), (cx - r, cy + r * 0.3), (cx + r, cy + r * 0.3)

    def crust() -> None:
        b.line(*tip, *left)
        b.line(*tip, *right)
        b.line(*left, *right)

    b.set_color("#f97316")
    b.pen_up()
    b.stroke(crust)
    b.set_color("#b91c1c")
    for dx, dy in ((-20, -10), (15, 0), (0, 15)):
        b.stroke(lambda dx=dx, dy=dy: b.circle(cx + dx, cy + dy, 6, 10))


def _house(b: StrokeBuilder) -> None:
    cx, w, h = b.cx, 160, 110
    base_x, base_y = cx - w / 2, b.cy

    def roof() -> None:
        b.line(base_x, base_y, cx, base_y - 80)
        b.line(cx, base_y - 80, base_x + w, base_y)

    b.set_color("#3b82f6")
    b.pen_up()
    b.stroke(lambda: b.rect(base_x, base_y, w, h))
    b.set_color("#b91c1c")
    b.stroke(roof)
    b.set_color("#4b5563")
    b.stroke(lambda: b.rect(cx - 20, base_y + 40, 40, 70))


def _tree(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.set_color("#92400e")
    b.pen_up()
    b.stroke(lambda: b.rect(cx - 15, cy + 10, 30, 80))
    b.set_color("#22c55e")
    b.stroke(lambda: b.circle(cx, cy - 10, 40))
    b.stroke(lambda: b.circle(cx - 25, cy, 30, 18))
    b.stroke(lambda: b.circle(cx + 25, cy, 30, 18))


def _car(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    body_w, body_h = 160, 50
    b.set_color("#3b82f6")
    b.pen_up()
    b.stroke(lambda: b.rect(cx - body_w / 2, cy, body_w, body_h))
    b.stroke(lambda: b.rect(cx - 40, cy - 30, 80, 30))
    b.set_color("#111827")
    for dx in (-60, 60):
        b.stroke(lambda dx=dx: b.circle(cx + dx, cy + body_h + 18, 18, 16))


def _train(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.pen_up()
    for color, (x, y, w, h) in (
        ("#3b82f6", (cx - 120, cy - 30, 60, 60)),
        ("#10b981", (cx - 60, cy - 20, 60, 50)),
        ("#f97316", (cx, cy - 30, 80, 60)),
    ):
        b.set_color(color)
        b.stroke(lambda x=x, y=y, w=w, h=h: b.rect(x, y, w, h))
    b.set_color("#111827")
    for dx in (-95, -35, 25, 65):
        b.stroke(lambda dx=dx: b.circle(cx + dx, cy + 40, 14, 12))


def _book(b: StrokeBuilder) -> None:
    w, h = 140, 90
    x, y = b.cx - w / 2, b.cy - h / 2
    b.set_color("#10b981")
    b.pen_up()
    b.stroke(lambda: b.rect(x, y, w, h))
    b.set_color("#111827")
    b.stroke(lambda: b.line(b.cx, y, b.cx, y + h))


def _phone(b: StrokeBuilder) -> None:
    w, h = 80, 150
    x, y = b.cx - w / 2, b.cy - h / 2
    b.set_color("#111827")
    b.pen_up()
    b.stroke(lambda: b.rect(x, y, w, h))
    b.set_color("#0ea5e9")
    b.stroke(lambda: b.rect(x + 8, y + 12, w - 16, h - 40))


def _camera(b: StrokeBuilder) -> None:
    w, h = 140, 80
    b.set_color("#374151")
    b.pen_up()
    b.stroke(lambda: b.rect(b.cx - w / 2, b.cy - h / 2, w, h))
    b.set_color("#fbbf24")
    b.stroke(lambda: b.circle(b.cx, b.cy, 28, 20))


def _airplane(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    body_ry = 90
    tail_y = cy + body_ry

    def wing(side: int) -> None:
        b.line(cx + side * 120, cy, cx + side * 20, cy - 10)
        b.line(cx + side * 20, cy - 10, cx + side * 20, cy + 10)
        b.line(cx + side * 20, cy + 10, cx + side * 120, cy)

    def tail() -> None:
        b.line(cx, tail_y - 20, cx - 30, tail_y + 30)
        b.line(cx - 30, tail_y + 30, cx + 30, tail_y + 30)
        b.line(cx + 30, tail_y + 30, cx, tail_y - 20)

    b.set_color("#e5e7eb")
    b.pen_up()
    b.stroke(lambda: b.ellipse(cx, cy, 30, body_ry, 40))
    b.set_color("#6b7280")
    b.stroke(lambda: wing(-1))
    b.stroke(lambda: wing(1))
    b.stroke(tail)


def _rocket(b: StrokeBuilder) -> None:
    body_w, body_h = 60, 160
    x, y = b.cx - body_w / 2, b.cy - body_h / 2

    def nose() -> None:
        b.line(x, y, b.cx, y - 40)
        b.line(b.cx, y - 40, x + body_w, y)

    b.set_color("#e5e7eb")
    b.pen_up()
    b.stroke(lambda: b.rect(x, y, body_w, body_h))
    b.set_color("#ef4444")
    b.stroke(nose)


def _fish(b: StrokeBuilder) -> None:
    cx, cy, length = b.cx, b.cy, 140
    left, right = cx - length / 2, cx + length / 2
    top, bottom = cy - 25, cy + 25
    tail_inner, tail_tip = left - 15, left - 40

    def body() -> None:
        b.line(left, cy, cx, top)
        b.line(cx, top, right, cy)
        b.line(right, cy, cx, bottom)
        b.line(cx, bottom, left, cy)

    def tail() -> None:
        b.line(left, cy, tail_inner, cy - 18)
        b.line(tail_inner, cy - 18, tail_tip, cy)
        b.line(tail_tip, cy, tail_inner, cy + 18)
        b.line(tail_inner, cy + 18, left, cy)

    b.set_color("#0ea5e9")
    b.pen_up()
    b.stroke(body)
    b.stroke(tail)
    b.stroke(lambda: b.line(cx, top, cx, bottom))
    b.stroke(lambda: b.line(cx - length * 0.3, cy, cx + length * 0.3, cy))
    b.stroke(lambda: b.arc(cx + length * 0.25, cy - 5, 3, 0, 2 * math.pi, 8))


def _umbrella(b: StrokeBuilder) -> None:
    cx, dome_y = b.cx, b.cy
    shaft_top = dome_y + 10
    shaft_bottom = shaft_top + 110
    b.set_color("#ec4899")
    b.pen_up()
    b.stroke(lambda: b.arc(cx, dome_y, 110, 0, math.pi, 40))
    for ox in (-75, -25, 25, 75):
        b.stroke(lambda ox=ox: b.arc(cx + ox, dome_y + 10, 25, math.pi, 2 * math.pi, 12))
    b.set_color("#111827")
    b.stroke(lambda: b.line(cx, shaft_top, cx, shaft_bottom - 15))
    b.stroke(lambda: b.arc(cx - 15, shaft_bottom - 15, 15, math.pi / 2, math.pi * 1.3, 12))


def _flower(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.set_color("#facc15")
    b.pen_up()
    b.stroke(lambda: b.circle(cx, cy, 12, 12))
    b.set_color("#f97316")
    for i in range(6):
        a = 2 * math.pi * i / 6
        b.stroke(lambda a=a: b.circle(cx + 30 * math.cos(a), cy + 30 * math.sin(a), 16, 16))


def _banana(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    r_outer, r_inner = 140, 110
    start, end = math.pi, 2 * math.pi
    inner_cy = cy + 18

    def ends() -> None:
        b.line(cx + r_outer * math.cos(start), cy + r_outer * math.sin(start),
               cx + r_inner * math.cos(start), inner_cy + r_inner * math.sin(start))
        b.line(cx + r_outer * math.cos(end), cy + r_outer * math.sin(end),
               cx + r_inner * math.cos(end), inner_cy + r_inner * math.sin(end))

    b.set_color("#facc15")
    b.pen_up()
    b.stroke(lambda: b.arc(cx, cy, r_outer, start, end, 32))
    b.set_color("#fbbf24")
    b.stroke(lambda: b.arc(cx, inner_cy, r_inner, start, end, 32))
    b.set_color("#facc15")
    b.stroke(ends)


def _chair(b: StrokeBuilder) -> None:
    seat_y = b.cy + 20
    x1, x2 = b.cx - 40, b.cx + 10

    def frame() -> None:
        b.line(x1, seat_y, x2, seat_y)
        b.line(x1, seat_y, x1, seat_y + 80)
        b.line(x2, seat_y, x2, seat_y + 90)
        b.line(x2, seat_y, x2, seat_y - 80)

    b.set_color("#6b7280")
    b.pen_up()
    b.stroke(frame)


def _table(b: StrokeBuilder) -> None:
    top_y = b.cy
    b.set_color("#4b5563")
    b.pen_up()
    b.stroke(lambda: b.line(b.cx - 150, top_y, b.cx + 150, top_y))
    for offset in (-80, 80):
        b.stroke(lambda offset=offset: b.line(b.cx + offset, top_y, b.cx + offset, top_y + 80))


def _cookie(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.set_color("#eab308")
    b.pen_up()
    b.stroke(lambda: b.circle(cx, cy, 45, 24))
    b.set_color("#b45309")
    b.stroke(lambda: b.circle(cx - 15, cy - 10, 4, 8))
    b.stroke(lambda: b.circle(cx + 10, cy - 5, 4, 8))


def _cloud(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.set_color("#e5e7eb")
    b.pen_up()
    b.stroke(lambda: b.circle(cx - 35, cy, 35, 18))
    b.stroke(lambda: b.circle(cx, cy - 15, 45, 18))
    b.stroke(lambda: b.circle(cx + 35, cy, 35, 18))


def _mountain(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy

    def outline() -> None:
        b.line(cx - 120, cy + 70, cx, cy - 80)
        b.line(cx, cy - 80, cx + 120, cy + 70)
        b.line(cx + 120, cy + 70, cx - 120, cy + 70)

    b.set_color("#6b7280")
    b.pen_up()
    b.stroke(outline)


def _river(b: StrokeBuilder) -> None:
    b.set_color("#0ea5e9")
    b.pen_up()
    b.stroke(lambda: b.wavy_line(b.cx - 150, b.cy - 80, b.cx + 150, b.cy + 80, 4, 20))


def _computer(b: StrokeBuilder) -> None:
    screen_w, screen_h, pad = 260, 140, 15
    x, y = b.cx - screen_w / 2, b.cy - screen_h / 2
    stand_top = y + screen_h
    stand_bottom = stand_top + 60

    def stand() -> None:
        b.line(b.cx, stand_top, b.cx - 35, stand_bottom)
        b.line(b.cx, stand_top, b.cx + 35, stand_bottom)
        b.line(b.cx - 35, stand_bottom, b.cx + 35, stand_bottom)

    b.set_color("#000000")
    b.pen_up()
    b.stroke(lambda: b.rect(x, y, screen_w, screen_h))
    b.stroke(lambda: b.rect(x + pad, y + pad, screen_w - 2 * pad, screen_h - 2 * pad))
    b.stroke(stand)


def _cat(b: StrokeBuilder) -> None:
    cx, cy, r = b.cx, b.cy, 60
    ear_y, ear_h, ear_off = cy - r, 40, 35

    def ear(side: int) -> None:
        b.line(cx + side * ear_off, ear_y, cx + side * ear_off / 2, ear_y - ear_h)
        b.line(cx + side * ear_off / 2, ear_y - ear_h, cx + side * ear_off / 4, ear_y)
        b.line(cx + side * ear_off / 4, ear_y, cx + side * ear_off, ear_y)

    b.set_color("#000000")
    b.pen_up()
    b.stroke(lambda: b.circle(cx, cy, r, 40))
    b.stroke(lambda: ear(-1))
    b.stroke(lambda: ear(1))
    b.stroke(lambda: b.circle(cx - 18, cy - 5, 3, 8))
    b.stroke(lambda: b.circle(cx + 18, cy - 5, 3, 8))
    for dy in (-30, 0, 30):
        b.stroke(lambda dy=dy: b.line(cx - 8, cy + dy, cx - 45, cy + dy))
        b.stroke(lambda dy=dy: b.line(cx + 8, cy + dy, cx + 45, cy + dy))


def _dog(b: StrokeBuilder) -> None:
    cx = b.cx
    body_w, body_h, head = 180, 80, 70
    body_x, body_y = cx - body_w / 2, b.cy
    head_y = body_y - head

    def ear(x: float, direction: int) -> None:
        b.line(x, head_y, x + direction * 10, head_y - 25)
        b.line(x + direction * 10, head_y - 25, x + direction * 20, head_y)
        b.line(x + direction * 20, head_y, x, head_y)

    def tail() -> None:
        tx, ty = body_x + body_w, body_y + 20
        b.line(tx, ty, tx + 40, ty - 15)
        b.line(tx + 40, ty - 15, tx, ty + 10)
        b.line(tx, ty + 10, tx, ty)

    b.set_color("#000000")
    b.pen_up()
    b.stroke(lambda: b.rect(body_x, body_y, body_w, body_h))
    b.stroke(lambda: b.rect(body_x, head_y, head, head))
    b.stroke(lambda: ear(body_x + 10, 1))
    b.stroke(lambda: ear(body_x + head - 10, -1))
    for offset in (-60, -20, 20, 60):
        b.stroke(lambda offset=offset: b.rect(cx + offset - 10, body_y + body_h, 20, 40))
    b.stroke(tail)


def _shoe(b: StrokeBuilder) -> None:
    base_y = b.cy + 40
    x1, x2 = b.cx - 130, b.cx + 80
    heel_top = base_y - 80
    b.set_color("#000000")
    b.pen_up()
    b.stroke(lambda: b.rect(x1, base_y - 25, x2 - x1, 25))
    b.stroke(lambda: b.line(x2, base_y - 25, x2, heel_top))
    b.stroke(lambda: b.line(x1 + 20, base_y - 25, x2, heel_top))
    b.stroke(lambda: b.ellipse(x2, heel_top, 45, 12, 28))


def _guitar(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    b.set_color("#f59e0b")
    b.pen_up()
    b.stroke(lambda: b.circle(cx - 20, cy, 30, 20))
    b.stroke(lambda: b.circle(cx + 20, cy, 20, 20))
    b.set_color("#6b7280")
    b.stroke(lambda: b.rect(cx + 30, cy - 10, 60, 20))


def _pencil(b: StrokeBuilder) -> None:
    cx, cy = b.cx, b.cy
    w, h = 30, 160
    top = cy - h / 2

    def tip() -> None:
        b.line(cx - w / 2, top + h, cx, top + h + 35)
        b.line(cx, top + h + 35, cx + w / 2, top + h)

    b.set_color("#facc15")
    b.pen_up()
    b.stroke(lambda: b.rect(cx - w / 2, top, w, h))
    b.set_color("#f472b6")
    b.stroke(lambda: b.rect(cx - w / 2, top - 20, w, 20))
    b.set_color("#111827")
    b.stroke(tip)


def _spiral(b: StrokeBuilder) -> None:
    base_radius, radius, angle = 80.0, 10.0, 0.0

    def coil() -> None:
        nonlocal radius, angle
        while angle < math.pi * 4:
            b.point(b.cx + radius * math.cos(angle), b.cy + radius * math.sin(angle))
            radius += (base_radius - radius) * 0.02
            angle += 0.06

    b.pen_up()
    b.stroke(coil)


# First substring match wins, so "car" is tested before "cat".
TEMPLATES: tuple[tuple[str, Callable[[StrokeBuilder], None]], ...] = (
    ("sun", _sun),
    ("moon", _moon),
    ("ball", _ball),
    ("pizza", _pizza),
    ("house", _house),
    ("tree", _tree),
    ("car", _car),
    ("train", _train),
    ("book", _book),
    ("phone", _phone),
    ("camera", _camera),
    ("airplane", _airplane),
    ("rocket", _rocket),
    ("fish", _fish),
    ("umbrella", _umbrella),
    ("flower", _flower),
    ("banana", _banana),
    ("chair", _chair),
    ("table", _table),
    ("cookie", _cookie),
    ("cloud", _cloud),
    ("mountain", _mountain),
    ("river", _river),
    ("computer", _computer),
    ("cat", _cat),
    ("dog", _dog),
    ("shoe", _shoe),
    ("guitar", _guitar),
    ("pencil", _pencil),
)


def template_for(word: str) -> Callable[[StrokeBuilder], None]:
    w = (word or "").strip().lower()
    for key, template in TEMPLATES:
        if key in w:
            return template
    return _spiral


def stroke_sequence(word: str) -> list[StrokeEvent]:
    builder = StrokeBuilder()
    template_for(word)(builder)
    return builder.events
