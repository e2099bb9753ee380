"""Shared helpers for driving a renderer with synthetic pointer events."""

from __future__ import annotations

from matplotlib.backend_bases import MouseButton, MouseEvent, ResizeEvent


def make_gene(start, end, strand="+", name=None, product=None, **extra):
    gene = {"contig": "chr", "start": start, "end": end, "strand": strand}
    if name is not None:
        gene["name"] = name
    if product is not None:
        gene["product"] = product
    gene.update(extra)
    return gene


def display_point(renderer, radius, angle):
    """Display pixel position of a polar scene point under the current view."""
    x, y = renderer.geometry.point_at(radius, angle)
    return renderer.zoom_ax.transData.transform((x, y))


def arc_center(renderer, index):
    arc = renderer.scene.arc_for_gene(index)
    mid_radius = (arc.geometry.inner_radius + arc.geometry.outer_radius) / 2
    return display_point(renderer, mid_radius, arc.geometry.mid_angle)


def dispatch(canvas, name, x, y, **kwargs):
    event = MouseEvent(name, canvas, x, y, **kwargs)
    canvas.callbacks.process(name, event)
    return event


def move(renderer, x, y):
    return dispatch(renderer.container.canvas, "motion_notify_event", x, y)


def press(renderer, x, y, button=MouseButton.LEFT):
    return dispatch(renderer.container.canvas, "button_press_event", x, y, button=button)


def release(renderer, x, y, button=MouseButton.LEFT):
    return dispatch(renderer.container.canvas, "button_release_event", x, y, button=button)


def scroll(renderer, x, y, step):
    return dispatch(renderer.container.canvas, "scroll_event", x, y, step=step)


def resize(renderer, width_in, height_in):
    canvas = renderer.container.canvas
    renderer.container.figure.set_size_inches(width_in, height_in)
    event = ResizeEvent("resize_event", canvas)
    canvas.callbacks.process("resize_event", event)
    return event


def ring_radii(renderer):
    """On-screen (x, y) radius of the outer ring in display pixels."""
    to_display = renderer.zoom_ax.transData.transform
    outer = renderer.geometry.outer_radius
    cx, cy = to_display((0, 0))
    return to_display((outer, 0))[0] - cx, to_display((0, outer))[1] - cy


def tooltip_gap(renderer):
    """Display-pixel distance between the tooltip's name and product baselines."""
    name, product = renderer.tooltip.artists
    _, name_y = name.get_transform().transform(name.get_position())
    _, product_y = product.get_transform().transform(product.get_position())
    return name_y - product_y


def visible_tooltips(renderer):
    return [
        t for t in renderer.zoom_ax.texts
        if (t.get_gid() or "").startswith("tooltip-") and t.get_visible()
    ]
