from PySide6.QtCore import QObject, Signal


class TraceHub(QObject):
    transform_traced = Signal(object)
    object_skipped = Signal(object, str)

    def __init__(self):
        super().__init__()
        self._console = False

    def emit_trace(self, trace):
        """Observer callable for the renderers."""
        self.transform_traced.emit(trace)

    def attach_console(self):
        if self._console:
            return
        self.transform_traced.connect(self._print_trace)
        self.object_skipped.connect(self._print_skip)
        self._console = True

    def detach_console(self):
        if not self._console:
            return
        self.transform_traced.disconnect(self._print_trace)
        self.object_skipped.disconnect(self._print_skip)
        self._console = False

    @staticmethod
    def _print_trace(trace):
        obj = trace.obj
        t = trace.transform
        print(f"[EXPORT] {type(obj).__name__} origin=({obj.origin_x}, {obj.origin_y}) "
              f"left/top=({obj.left:.2f}, {obj.top:.2f}) size=({obj.width:.2f}, {obj.height:.2f}) "
              f"scale=({obj.scale_x:.3f}, {obj.scale_y:.3f}) angle={obj.angle:.2f}")
        print(f"[EXPORT]   editor center=({trace.editor_center[0]:.2f}, {trace.editor_center[1]:.2f}) "
              f"page center=({trace.center[0]:.2f}, {trace.center[1]:.2f}) "
              f"ratios=({trace.ratios[0]:.4f}, {trace.ratios[1]:.4f}) theta={t.theta:.4f}")
        print(f"[EXPORT]   rotate={tuple(round(v, 4) for v in t.rotate)} "
              f"scale={tuple(round(v, 4) for v in t.scale)}")
        if trace.local_origin is not None:
            print(f"[EXPORT]   local origin=({trace.local_origin[0]:.2f}, {trace.local_origin[1]:.2f})")

    @staticmethod
    def _print_skip(obj, reason):
        print(f"Warning: skipped {type(obj).__name__} during export: {reason}")
