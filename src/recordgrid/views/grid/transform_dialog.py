"""Dialog for transforming the selected cells (find/replace, pattern, math)."""

import tkinter as tk
from tkinter import ttk

from ...services.transform_service import TransformSpec, transform_value


class TransformDialog(tk.Toplevel):
    """Modal prompt that collects a TransformSpec.

    The preview line shows what the first selected value becomes.
    """

    def _current_spec(self) -> TransformSpec:
        return TransformSpec(
            find_text=self.find_var.get(),
            replace_text=self.replace_var.get(),
            pattern_text=self.pattern_var.get(),
            math_operation=self.math_var.get(),
            regex_mode=self.regex_var.get(),
        )

    def _update_preview(self, *_args) -> None:
        if not self.sample_value and self.sample_record is None:
            self.preview_label.config(text="")
            return
        preview = transform_value(self.sample_value, self._current_spec(), self.sample_record)
        self.preview_label.config(text=f"{self.sample_value!r} -> {preview!r}")

    def _on_ok(self) -> None:
        spec = self._current_spec()
        self.result = None if spec.is_empty else spec
        self.destroy()

    def _on_cancel(self) -> None:
        self.result = None
        self.destroy()

    def _add_row(self, parent: ttk.Frame, row: int, label: str, var: tk.StringVar) -> ttk.Entry:
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky="w", pady=2)
        entry = ttk.Entry(parent, textvariable=var, width=40)
        entry.grid(row=row, column=1, sticky="ew", pady=2)
        var.trace_add("write", self._update_preview)
        return entry

    def _create_widgets(self) -> None:
        """Create dialog widgets."""
        main_frame = ttk.Frame(self, padding=8)
        main_frame.pack(fill=tk.BOTH, expand=True)
        main_frame.columnconfigure(1, weight=1)

        self.find_var = tk.StringVar()
        self.replace_var = tk.StringVar()
        self.pattern_var = tk.StringVar()
        self.math_var = tk.StringVar()
        self.regex_var = tk.BooleanVar(value=False)

        self.find_entry = self._add_row(main_frame, 0, "Find:", self.find_var)
        self._add_row(main_frame, 1, "Replace:", self.replace_var)
        self._add_row(main_frame, 2, 'Pattern ({} or $"Column"):', self.pattern_var)
        self._add_row(main_frame, 3, "Math (x+1, 2x, -x):", self.math_var)

        ttk.Checkbutton(
            main_frame,
            text="Regex find",
            variable=self.regex_var,
            command=self._update_preview,
        ).grid(row=4, column=1, sticky="w")

        self.preview_label = ttk.Label(main_frame, text="", foreground="gray")
        self.preview_label.grid(row=5, column=0, columnspan=2, sticky="w", pady=(6, 0))

        btn_frame = ttk.Frame(main_frame)
        btn_frame.grid(row=6, column=0, columnspan=2, sticky="e", pady=(8, 0))
        ttk.Button(btn_frame, text="OK", command=self._on_ok).pack(side=tk.LEFT)
        ttk.Button(btn_frame, text="Cancel", command=self._on_cancel).pack(
            side=tk.LEFT, padx=(4, 0)
        )

    def __init__(self, parent: tk.Widget, cell_count: int, sample_value="", sample_record=None):
        """Initialize the transform dialog.

        Args:
            parent: Parent widget
            cell_count: Number of selected editable cells (shown in the title)
            sample_value: Value of the first selected cell, for the preview
            sample_record: Record of the first selected cell, for $"Column" lookups
        """
        super().__init__(parent)
        self.title(f"Edit {cell_count} cell(s)")
        self.transient(parent)
        self.grab_set()

        self.sample_value = sample_value
        self.sample_record = sample_record
        self.result: TransformSpec | None = None

        self._create_widgets()
        self._update_preview()

        self.find_entry.focus_set()
        self.bind("<Return>", lambda e: self._on_ok())
        self.bind("<Escape>", lambda e: self._on_cancel())

    def show(self) -> TransformSpec | None:
        """Run the dialog modally and return the spec, or None if cancelled."""
        self.wait_window()
        return self.result
