import os
import platform

from configobj import ConfigObj, ConfigObjError, Section, flatten_errors
from validate import Validator

config_extension = '.cfg'

# flavors of a configuration, from lowest to highest precedence. The user's file and the
# unflavored base file are layered on top of these.
default_flavor = 'default'
schema_flavor = 'schema'


def config_flavor(name, flavor=None):
    """
    >>> config_flavor('serialmgr_test', 'linux')
    'serialmgr_test.linux'
    """
    return name + '.' + flavor if flavor else name


def config_filename(name, directory):
    return os.path.join(directory, name + config_extension)


def load_config_file_base(file, must_exist=True) -> ConfigObj:
    """
    Reads one configuration file.
    :param must_exist: when False, a missing file reads as an empty configuration
    :raises IOError: when the file must exist and does not
    :raises ConfigObjError: when the file is malformed. The message names the file.
    """
    if not must_exist and not os.path.exists(file):
        return ConfigObj()
    try:
        return ConfigObj(file, interpolation='Template', file_error=True)
    except ConfigObjError as e:
        raise type(e)('%s at %s' % (e, file))


def load_schema(name, directory) -> ConfigObj:
    """
    Reads the schema for a configuration, if there is one. Schema values are validator checks,
    e.g. baud = integer(min=300, default=57600).
    """
    file = config_filename(config_flavor(name, schema_flavor), directory)
    if not os.path.exists(file):
        return ConfigObj()
    try:
        return ConfigObj(file, list_values=False, _inspec=True)
    except ConfigObjError as e:
        raise type(e)('%s at %s' % (e, file))


def map_os_name(name):
    """
    >>> map_os_name('Windows')
    'windows'
    >>> map_os_name("Darwin")
    'osx'
    """
    name = name.lower()
    return 'osx' if name == 'darwin' else name


def os_name():
    return map_os_name(platform.system())


def config_layers(name, directory, user_directory='~'):
    """
    The files making up a configuration, lowest precedence first:
    the default flavor, the platform flavor, the user's file and then the base file.
    Missing files are empty layers.
    """
    flavored = [config_filename(config_flavor(name, flavor), directory)
                for flavor in (default_flavor, os_name())]
    user = config_filename(name, os.path.expanduser(user_directory))
    base = config_filename(name, directory)
    return [load_config_file_base(file, must_exist=False) for file in flavored + [user, base]]


def describe_errors(config, result):
    """
    :return: one line per value or section that failed validation
    """
    problems = []
    for sections, key, error in flatten_errors(config, result):
        where = '.'.join(sections + [key]) if key is not None else '.'.join(sections)
        problems.append('%s: %s' % (where, error if key is not None and error else 'missing'))
    return '; '.join(problems)


def load_config(name, directory, user_directory='~') -> ConfigObj:
    """
    Merges the layers of a configuration and validates the result against the schema.
    Values the schema gives a type for are converted, and schema defaults fill in values that
    no layer defines.
    :param name: the base name of the configuration files
    :param directory: the directory holding the base, flavor and schema files
    :param user_directory: the directory holding the user's file
    :raises ConfigObjError: when a file is malformed or a value fails validation
    """
    config = ConfigObj(configspec=load_schema(name, directory))
    for layer in config_layers(name, directory, user_directory):
        config.merge(layer)
    result = config.validate(Validator(), preserve_errors=True)
    if result is not True:
        raise ConfigObjError("the config file %s failed validation: %s" % (name, describe_errors(config, result)))
    return config


def fetch_conf_path(conf: Section, path):
    """
    Descends through nested sections.
    :param path: the section names, outermost first
    :return: the section, or None when any part of the path is not defined
    """
    for part in path:
        if not isinstance(conf, Section) or part not in conf:
            return None
        conf = conf[part]
    return conf


def apply_conf(conf: Section, target):
    """
    Sets each attribute of target named by a value in conf. Names target does not
    already have are ignored, as are subsections.
    """
    for key in conf.scalars:
        if hasattr(target, key):
            setattr(target, key, conf[key])


def apply_conf_path(conf: Section, path, target):
    section = fetch_conf_path(conf, path)
    if section:
        apply_conf(section, target)


def reconstruct_name(path, package_depth):
    """
    Rebuilds the dotted name of a module from its file, given how deep it is in its packages.

    >>> reconstruct_name('C:/drive/dir/package1/package2/module.py', 2)
    'package1.package2.module'
    >>> reconstruct_name('C:\\\\drive\\\\dir\\\\module.py', 0)
    'module'
    """
    parts = path.replace('\\', '/').split('/')
    parts[-1] = os.path.splitext(parts[-1])[0]
    return '.'.join(parts[-(package_depth + 1):])


def fq_module_name(module):
    """
    The dotted name of a module, also when it is run as __main__.
    :raises ConfigObjError: when the module is not in a package
    """
    if not module.__package__:
        raise ConfigObjError('%s has no package defined' % (module,))
    if module.__name__ != '__main__':
        return module.__name__
    return reconstruct_name(module.__file__, module.__package__.count('.') + 1)


def configure_module(module, config_name=None, user_directory='~'):
    """
    Sets a module's globals from its configuration.
    The files are found beside the module and are named after it, unless config_name is given.
    Values are read from the sections named by the module's dotted name, so the globals of
    devicelink.manager.serialmgr_test are set from [devicelink] [[manager]] [[[serialmgr_test]]].
    """
    name = fq_module_name(module)
    if not config_name:
        config_name = name.rsplit('.', 1)[-1]
    conf = load_config(config_name, os.path.dirname(module.__file__), user_directory)
    apply_conf_path(conf, name.split('.'), module)
