"""LaraOps file utils core classes."""
import grp
import os
import pwd
import shutil

from lo.core.logging import Log


class LOFileUtils():
    """Utilities to operate on files"""

    def __init__():
        pass

    def has_entries(self, path):
        """True when path is a directory that contains at least one entry"""
        if not os.path.isdir(path):
            return False
        with os.scandir(path) as entries:
            return any(True for _ in entries)

    def mkdir(self, path):
        """
            create directories, parents included
        """
        Log.debug(self, "Creating directory {0}".format(path))
        os.makedirs(path, exist_ok=True)

    def create_symlink(self, paths):
        """
            Create symbolic links provided in list with first as source
            and second as destination
        """
        src = paths[0]
        dst = paths[1]
        if os.path.islink(dst):
            Log.debug(self, "Destination: {0} exists".format(dst))
            return
        try:
            Log.debug(self, "Creating Symbolic link, Source:{0}, Dest:{1}"
                      .format(src, dst))
            os.symlink(src, dst)
        except OSError as e:
            Log.debug(self, "{0}".format(e))
            Log.error(self, "Unable to create symbolic link {0}"
                      .format(dst), False)
            raise

    def remove_symlink(self, filepath):
        """
            Removes symbolic link for the path provided with filepath
        """
        if os.path.islink(filepath):
            Log.debug(self, "Removing symbolic link: {0}".format(filepath))
            os.unlink(filepath)

    def touch(self, path):
        """Create an empty file, True when it did not exist before"""
        if os.path.exists(path):
            return False
        LOFileUtils.mkdir(self, os.path.dirname(path))
        with open(path, 'a', encoding='utf-8'):
            pass
        return True

    def copyfile(self, src, dest):
        """
        Copies files:
            src : source path
            dest : destination path
        """
        Log.debug(self, "Copying file, Source:{0}, Dest:{1}"
                  .format(src, dest))
        shutil.copy2(src, dest)

    def mvfile(self, src, dst):
        """
            Moves file from source path to destination path
            src : source path
            dst : Destination path
        """
        Log.debug(self, "Moving file from {0} to {1}".format(src, dst))
        shutil.move(src, dst)

    def backup(self, path, suffix='.lo-bak'):
        """Copy path next to itself and return the backup path"""
        backup_path = path + suffix
        LOFileUtils.copyfile(self, path, backup_path)
        return backup_path

    def chown(self, path, user, group, recursive=False):
        """
            Change Owner for files
            change owner for file with path specified
            user: username of owner
            group: group of owner
            recursive: if recursive is True change owner for all
                       files in directory
        """
        userid = pwd.getpwnam(user)[2]
        groupid = grp.getgrnam(group)[2]
        Log.debug(self, "Changing ownership of {0} to {1}:{2}"
                  .format(path, user, group))
        if recursive:
            for root, dirs, files in os.walk(path):
                for name in dirs + files:
                    os.lchown(os.path.join(root, name), userid, groupid)
        os.lchown(path, userid, groupid)

    def chmod(self, path, perm, recursive=False):
        """
            Changes Permission for files
            path : file path permission to be changed
            perm : permissions to be given
            recursive: change permission recursively for all files
        """
        Log.debug(self, "Changing permission of {0} to {1}"
                  .format(path, oct(perm)))
        if recursive:
            for root, dirs, files in os.walk(path):
                for name in dirs + files:
                    target = os.path.join(root, name)
                    if not os.path.islink(target):
                        os.chmod(target, perm)
        os.chmod(path, perm)

    def rm(self, path):
        """
            Remove files or directories
        """
        Log.debug(self, "Removing {0}".format(path))
        if os.path.islink(path) or os.path.isfile(path):
            os.remove(path)
        elif os.path.isdir(path):
            shutil.rmtree(path)

    def empty_dir(self, path):
        """Remove every entry of a directory, keeping the directory"""
        with os.scandir(path) as entries:
            for entry in list(entries):
                LOFileUtils.rm(self, entry.path)
