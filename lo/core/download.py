"""LaraOps download core classes."""
import os

import requests

from lo.core.logging import Log


class LODownload():
    """Method to download using requests"""

    def __init__():
        pass

    def download(self, packages, timeout=60):
        """Download packages, packages must be a list of
        [url, destination_path, description] entries.
        Returns False as soon as one download fails."""
        for package in packages:
            url, filename, pkg_name = package
            directory = os.path.dirname(filename)
            if directory:
                os.makedirs(directory, exist_ok=True)
            Log.wait(self, "Downloading {0:20}".format(pkg_name))
            try:
                with requests.get(url, stream=True, timeout=timeout) as response:
                    response.raise_for_status()
                    with open(filename, 'wb') as out_file:
                        for chunk in response.iter_content(chunk_size=65536):
                            out_file.write(chunk)
            except (requests.RequestException, OSError) as e:
                Log.failed(self, "Downloading {0:20}".format(pkg_name))
                Log.debug(self, "[{err}]".format(err=str(e)))
                return False
            Log.valide(self, "Downloading {0:20}".format(pkg_name))
        return True
