"""LaraOps Extract Core """
import os
import tarfile

from lo.core.logging import Log


def _checked_members(tar, path):
    """Members of tar, TarError when one would land outside path"""
    root = os.path.realpath(path)
    for member in tar.getmembers():
        if member.isdev():
            raise tarfile.TarError("device entry {0}".format(member.name))
        targets = [member.name]
        if member.issym():
            targets.append(os.path.join(os.path.dirname(member.name),
                                        member.linkname))
        elif member.islnk():
            targets.append(member.linkname)
        for target in targets:
            dest = os.path.realpath(os.path.join(root, target))
            if os.path.commonpath([root, dest]) != root:
                raise tarfile.TarError("{0} is outside {1}"
                                       .format(member.name, path))
    return tar.getmembers()


class LOExtract():
    """Method to extract from tar.gz file"""

    def extract(self, file, path):
        """Function to extract tar.gz file, the archive is removed
        afterwards. Returns False on a corrupt or unsafe archive."""
        try:
            with tarfile.open(file, 'r:gz') as tar:
                if hasattr(tarfile, 'data_filter'):
                    tar.extractall(path=path, filter='data')
                else:
                    tar.extractall(path=path,
                                   members=_checked_members(tar, path))
            os.remove(file)
            return True
        except (tarfile.TarError, OSError) as e:
            Log.debug(self, "{0}".format(e))
            Log.error(self, 'Unable to extract file {0}'.format(file), False)
            return False
