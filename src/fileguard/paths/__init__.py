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

"""Free-standing filesystem operations that raise instead of failing quietly.

Example usage::

    from fileguard.paths import duplicate, remove, temp_dir

    workspace = temp_dir("build-%s")
    duplicate("assets", f"{workspace}/assets", overwrite=False)
    remove(workspace)
"""

from __future__ import annotations

from ._meta import modified, permissions
from ._temp import (
    DEFAULT_TEMP_TEMPLATE,
    TEMP_PLACEHOLDER,
    temp_dir,
    temp_file,
    temp_path,
)
from ._tree import UNLIMITED_DEPTH, duplicate, remove, resolve

__all__ = [
    "DEFAULT_TEMP_TEMPLATE",
    "TEMP_PLACEHOLDER",
    "UNLIMITED_DEPTH",
    "duplicate",
    "modified",
    "permissions",
    "remove",
    "resolve",
    "temp_dir",
    "temp_file",
    "temp_path",
]
