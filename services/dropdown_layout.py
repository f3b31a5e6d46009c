"""Viewport placement and dismissal rules for floating picker dropdowns."""

EDGE_MARGIN = 8
ESTIMATED_WIDTH = 240
ESTIMATED_HEIGHT = 300


def compute_position(trigger, viewport_width, viewport_height, offset_x=-ESTIMATED_WIDTH, offset_y=0,
                     alignment='left'):
    """Return {'top', 'left'} for a dropdown anchored to `trigger`.

    `trigger` is a mapping with the trigger's bounding rect (top, left, right, bottom)
    in viewport coordinates.
    """
    if alignment == 'left':
        left = max(trigger['left'] + offset_x, EDGE_MARGIN)
    else:
        left = trigger['right'] + offset_x
        if left + ESTIMATED_WIDTH > viewport_width - EDGE_MARGIN:
            left = viewport_width - ESTIMATED_WIDTH - EDGE_MARGIN

    top = trigger['top'] + offset_y
    if top + ESTIMATED_HEIGHT > viewport_height - EDGE_MARGIN:
        above = trigger['bottom'] - ESTIMATED_HEIGHT + offset_y
        if above >= EDGE_MARGIN:
            top = above
        else:
            top = viewport_height - ESTIMATED_HEIGHT - EDGE_MARGIN
    top = max(top, EDGE_MARGIN)
    return {'top': top, 'left': left}


class DropdownState:
    """Open/closed state of one dropdown with outside-click and Escape dismissal."""

    def __init__(self, is_open=False):
        self.is_open = is_open

    def open(self):
        self.is_open = True

    def close(self):
        self.is_open = False

    def toggle(self):
        self.is_open = not self.is_open
        return self.is_open

    def handle_click(self, inside_dropdown=False, on_trigger=False):
        # Trigger clicks are left to the trigger's own toggle.
        if self.is_open and not inside_dropdown and not on_trigger:
            self.close()
        return self.is_open

    def handle_key(self, key):
        if self.is_open and key == 'Escape':
            self.close()
        return self.is_open
