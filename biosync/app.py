import sys
from PySide6.QtWidgets import QApplication
from biosync.view import View
from biosync.model import Model
from biosync.monitor import Monitor


class Application(QApplication):
    def __init__(self, sys_argv):
        super(Application, self).__init__(sys_argv)
        self.setApplicationName("BioSync")
        self._model = Model()
        self._monitor = Monitor(self._model)
        self._view = View(self._model, self._monitor)


def main():
    try:
        app = Application(sys.argv)
    except Exception as e:
        print(f"Couldn't set up BioSync: {e}")
        sys.exit(1)
    app._view.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
