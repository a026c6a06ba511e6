# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Create, read and remove files under a host-backed virtual filesystem."""

from __future__ import annotations

import tempfile
from pathlib import Path

from vfskit import HostFilesystem
from vfskit.logging import configure_logging, get_logger

logger = get_logger(__name__)


def main() -> None:
    configure_logging()
    root = Path(tempfile.gettempdir()) / "my_vfs"
    logger.info("Using temp dir.", event="demo.start", context={"root": str(root)})

    # Leaving the block removes everything the instance created, root included.
    with HostFilesystem(root) as fs:
        fs.mkdir("/docs")
        fs.cd("docs")

        # Relative: created in the working directory.
        fs.mkfile("first.txt", b"Hello")
        # Absolute: created at the root.
        fs.mkfile("/second.txt", b"World")
        fs.cd("..")

        first = fs.read("/docs/first.txt")
        second = fs.read("/second.txt")
        print(f"{first.decode()}, {second.decode()}!")

        fs.rm("/docs/first.txt")
        fs.rm("/second.txt")


if __name__ == "__main__":
    main()
