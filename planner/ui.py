"""
Tkinter helpers for the path planner: root pump, points list, robot and crop
settings windows and the controls reference.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import ttk, simpledialog

from .config import METERS_PER_INCH

tk_root = None
tk_robot_win = None
tk_output_win = None
tk_output_rows = None
tk_controls_win = None
tk_crop_win = None
tk_crop_vars = {}

CROP_FIELDS = ("left", "right", "top", "bottom")

ROBOT_FIELDS = [
    ("width", "Robot width (in)", METERS_PER_INCH, "Frame width without bumpers."),
    ("height", "Robot length (in)", METERS_PER_INCH, "Frame length without bumpers."),
    ("bumper", "Bumper thickness (in)", METERS_PER_INCH, "Added on every side of the frame."),
    ("speed", "Playback speed (m/s)", 1.0, "Constant speed used by playback."),
]


def ensure_tk_root():
    """Initialize Tkinter root window with styling."""
    global tk_root
    if tk_root is None or not (hasattr(tk_root, "winfo_exists") and tk_root.winfo_exists()):
        tk_root = tk.Tk()
        try:
            style = ttk.Style(tk_root)
            if "clam" in style.theme_names():
                style.theme_use("clam")
            style.configure("TFrame", padding=6)
            style.configure("TLabel", padding=2)
            style.configure("TEntry", padding=2)
            style.configure("Help.TLabel", foreground="#777777")
        except tk.TclError:
            pass
        tk_root.withdraw()
    return tk_root


def pump_tk():
    """Update Tkinter event loop."""
    global tk_root, tk_robot_win, tk_output_win, tk_output_rows, tk_controls_win, tk_crop_win
    if tk_root is None:
        return
    try:
        tk_root.update()
        if tk_robot_win is not None and not tk_robot_win.winfo_exists():
            tk_robot_win = None
        if tk_output_win is not None and not tk_output_win.winfo_exists():
            tk_output_win = None
            tk_output_rows = None
        if tk_controls_win is not None and not tk_controls_win.winfo_exists():
            tk_controls_win = None
        if tk_crop_win is not None and not tk_crop_win.winfo_exists():
            tk_crop_win = None
            tk_crop_vars.clear()
    except tk.TclError:
        tk_root = None
        tk_robot_win = None
        tk_output_win = None
        tk_output_rows = None
        tk_controls_win = None
        tk_crop_win = None
        tk_crop_vars.clear()


class _Tooltip:
    """Hover tooltip for widgets."""

    def __init__(self, widget, text):
        self.widget = widget
        self.text = text
        self.tip = None
        widget.bind("<Enter>", self._show)
        widget.bind("<Leave>", self._hide)

    def _show(self, _=None):
        if self.tip or not self.text:
            return
        x = self.widget.winfo_rootx() + 20
        y = self.widget.winfo_rooty() + self.widget.winfo_height() + 8
        self.tip = tk.Toplevel(self.widget)
        self.tip.wm_overrideredirect(True)
        self.tip.geometry(f"+{x}+{y}")
        ttk.Label(self.tip, text=self.text, justify="left", wraplength=300).pack()

    def _hide(self, _=None):
        if self.tip:
            try:
                self.tip.destroy()
            except tk.TclError:
                pass
            self.tip = None


def add_tooltip(widget, text):
    """Add tooltip to widget."""
    if text:
        _Tooltip(widget, text)


def _delete_point(session, index, on_change):
    if index >= len(session.waypoints):
        return
    if session.delete_waypoint(index) is None:
        print("Point not deleted while a drag is in progress.")
        return
    print(f"Deleted point P{index + 1}")
    on_change()


def _fill_rows(session, lines, on_change):
    for child in tk_output_rows.winfo_children():
        child.destroy()
    n = len(session.waypoints)
    for i, line in enumerate(lines):
        row = ttk.Frame(tk_output_rows, padding=0)
        row.pack(fill="x", pady=1)
        ttk.Label(row, text=line, anchor="w").pack(side="left", fill="x", expand=True)
        if i < n:
            ttk.Button(row, text="Delete", width=7,
                       command=lambda i=i: _delete_point(session, i, on_change)).pack(side="right")


def output_refresh(session, lines, on_change):
    """Rebuild the points list rows."""
    if tk_output_win and tk_output_rows is not None:
        try:
            _fill_rows(session, lines, on_change)
        except tk.TclError:
            pass


def toggle_output_window(session, on_change):
    """Toggle the points list window; each waypoint row has a delete button."""
    global tk_output_win, tk_output_rows
    ensure_tk_root()
    if tk_output_win and tk_output_win.winfo_exists():
        try:
            tk_output_win.destroy()
        except tk.TclError:
            pass
        tk_output_win = None
        tk_output_rows = None
        return
    top = tk.Toplevel(tk_root)
    tk_output_win = top
    top.title("Points")
    top.geometry("420x500")
    tk_output_rows = ttk.Frame(top)
    tk_output_rows.pack(fill="both", expand=True)
    _fill_rows(session, session.points_summary(), on_change)
    top.protocol("WM_DELETE_WINDOW", lambda: top.destroy())


def toggle_controls_window(controls):
    """Toggle the key/mouse reference window."""
    global tk_controls_win
    ensure_tk_root()
    if tk_controls_win is not None and tk_controls_win.winfo_exists():
        tk_controls_win.destroy()
        tk_controls_win = None
        return
    top = tk.Toplevel(tk_root)
    tk_controls_win = top
    top.title("Controls")
    frame = ttk.Frame(top)
    frame.pack(fill="both", expand=True)
    for i, (key, desc) in enumerate(controls):
        ttk.Label(frame, text=key, font=("Segoe UI", 10, "bold")).grid(
            row=i, column=0, sticky="nw", padx=(8, 6), pady=3
        )
        ttk.Label(frame, text=desc, anchor="w", justify="left").grid(
            row=i, column=1, sticky="w", padx=(0, 8), pady=3
        )


def crop_window_refresh(crop):
    """Push a crop changed elsewhere (crop drag) into the slider window."""
    if tk_crop_win is None or not tk_crop_vars:
        return
    try:
        for key, (var, text) in tk_crop_vars.items():
            var.set(crop[key])
            text.set(f"{key.capitalize()}: {crop[key]:.0f} px")
    except tk.TclError:
        pass


def open_crop_window(session, on_change):
    """Four crop sliders bounded by the image size; changes apply live."""
    global tk_crop_win
    ensure_tk_root()
    if session.image_size is None:
        return
    if tk_crop_win is not None and tk_crop_win.winfo_exists():
        tk_crop_win.lift()
        return
    top = tk.Toplevel(tk_root)
    tk_crop_win = top
    top.title("Crop")
    frame = ttk.Frame(top)
    frame.pack(fill="both", expand=True)
    tk_crop_vars.clear()

    def _apply(_value=None):
        vals = {k: var.get() for k, (var, _) in tk_crop_vars.items()}
        changed = session.apply_crop_input(vals["left"], vals["right"], vals["top"], vals["bottom"])
        crop_window_refresh(session.crop)
        if changed:
            on_change()

    w, h = session.image_size
    for r, key in enumerate(CROP_FIELDS):
        limit = w if key in ("left", "right") else h
        var = tk.DoubleVar(value=session.crop[key])
        text = tk.StringVar(value=f"{key.capitalize()}: {session.crop[key]:.0f} px")
        tk_crop_vars[key] = (var, text)
        ttk.Label(frame, textvariable=text, width=18).grid(row=r, column=0, sticky="w")
        ttk.Scale(frame, from_=0, to=limit, orient="horizontal", length=280,
                  variable=var, command=_apply).grid(row=r, column=1, sticky="ew")

    ttk.Label(frame, text="Edges are reordered if they cross.", style="Help.TLabel").grid(
        row=len(CROP_FIELDS), column=0, columnspan=2, sticky="w")

    def _close():
        global tk_crop_win
        tk_crop_vars.clear()
        tk_crop_win = None
        top.destroy()

    top.protocol("WM_DELETE_WINDOW", _close)


def open_robot_window(session, on_change):
    """Robot geometry entries; valid positive values apply live."""
    global tk_robot_win
    ensure_tk_root()
    if tk_robot_win is not None and tk_robot_win.winfo_exists():
        tk_robot_win.lift()
        return
    top = tk.Toplevel(tk_root)
    tk_robot_win = top
    top.title("Robot Settings")
    frame = ttk.Frame(top)
    frame.pack(fill="both", expand=True)

    for r, (key, label, unit, tip) in enumerate(ROBOT_FIELDS):
        var = tk.StringVar(value=f"{session.robot[key] / unit:.1f}")
        lbl = ttk.Label(frame, text=label)
        lbl.grid(row=r, column=0, sticky="w")
        entry = ttk.Entry(frame, textvariable=var, width=10)
        entry.grid(row=r, column=1, sticky="e")
        add_tooltip(lbl, tip)

        def _apply(_evt=None, key=key, var=var, unit=unit):
            try:
                val = float(var.get()) * unit
            except ValueError:
                return
            if session.set_robot_dimension(key, val):
                on_change()

        entry.bind("<KeyRelease>", _apply)

    ttk.Label(frame, text="Non-positive values are ignored.", style="Help.TLabel").grid(
        row=len(ROBOT_FIELDS), column=0, columnspan=2, sticky="w")

    def _close():
        on_change()
        top.destroy()

    top.protocol("WM_DELETE_WINDOW", _close)


def ask_event_name(current: str):
    """Prompt for an event name; None when cancelled."""
    ensure_tk_root()
    return simpledialog.askstring("Event", "Event name:", initialvalue=current, parent=tk_root)
