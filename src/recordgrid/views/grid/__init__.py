"""Grid views package.

GridWindow (search box plus tksheet table) and the cell TransformDialog.

Keyboard by Mode
================

+-------------------+-------------------------------+------------------------------+
| Key               | Normal mode                   | Edit mode                    |
+-------------------+-------------------------------+------------------------------+
| F2                | Enter edit mode               | Edit selection / leave mode  |
| Enter             | Finish selection / create     | Commit and close             |
| Escape            | Cancel session                | Leave edit mode              |
| Arrows            | tksheet row navigation        | Move current cell            |
| Shift+Arrows      | -                             | Extend rectangle             |
| Ctrl+Arrows       | -                             | Add cell to selection        |
| Shift/Ctrl+Space  | -                             | Select rows / columns        |
| Ctrl+V            | -                             | Paste                        |
| Delete            | Delete rows (host callback)   | -                            |
| Ctrl+E            | Export CSV                    | Export CSV                   |
+-------------------+-------------------------------+------------------------------+

F2 in edit mode opens the transform prompt when editable cells are selected,
otherwise it leaves edit mode.
"""
