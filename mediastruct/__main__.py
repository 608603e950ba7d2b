#############################################################################
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
#############################################################################
#
#  Project Name        :    Media container structure inspector
#
#  Author              :    Alex Ashley
#
#############################################################################

import argparse
import logging
from logging.config import dictConfig
import sys

from mediastruct.analyzer import MediaAnalyzer
from mediastruct.console import print_tree, records_to_json, to_json
from mediastruct.detector import DetectionStrategy
from mediastruct.errors import MediaError
from mediastruct.options import Options

def configure_logging(verbose: int) -> None:
    log_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'default',
                'stream': 'ext://sys.stderr',
            },
        },
        'formatters': {
            'default': {
                'datefmt': r'%H:%M:%S',
                'format': r'%(asctime)-8s:%(levelname)s:%(filename)s@%(lineno)d: %(message)s',
            }
        },
        'loggers': {
            'mediastruct': {
                'level': 'WARN',
            },
            'mediastruct.fio': {
                'level': 'WARN',
            },
        },
        'root': {
            'level': 'WARN',
            'handlers': ['console'],
        },
    }
    if verbose > 0:
        log_config['loggers']['mediastruct']['level'] = 'INFO'
        if verbose > 1:
            log_config['root']['level'] = 'DEBUG'
            log_config['loggers']['mediastruct']['level'] = 'DEBUG'
        if verbose > 2:
            log_config['loggers']['mediastruct.fio']['level'] = 'DEBUG'
    dictConfig(log_config)

def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog='mediastruct',
        description='Shows the structure of ISOBMFF (MP4, MOV) and RealMedia files')
    ap.add_argument('-s', '--strategy', choices=['auto', 'extension', 'content'],
                    default='auto', help='File format detection strategy')
    ap.add_argument('--json', action='store_true',
                    help='Output the element tree as JSON')
    ap.add_argument('--records', action='store_true',
                    help='Output the decoded records as JSON')
    ap.add_argument('--strict', action='store_true',
                    help='Fail if the file cannot be parsed to the end')
    ap.add_argument('--color', choices=['auto', 'always', 'never'], default='auto',
                    help='Colour the tree output (auto: only on a terminal)')
    ap.add_argument('-v', '--verbose', action='count', default=0,
                    help='Increase logging verbosity')
    ap.add_argument('files', nargs='+', metavar='FILE', help='File(s) to analyze')
    args = ap.parse_args(argv)
    configure_logging(args.verbose)
    log = logging.getLogger('mediastruct')
    options = Options(debug=(args.verbose > 2), strict=args.strict)
    analyzer = MediaAnalyzer(DetectionStrategy.from_string(args.strategy), options)
    if args.color == 'auto':
        color = sys.stdout.isatty()
    else:
        color = args.color == 'always'
    rv = 0
    for filename in args.files:
        try:
            info = analyzer.analyze(filename)
        except MediaError as err:
            log.error('%s: %s', filename, err)
            rv = 1
            continue
        if args.records:
            print(records_to_json(info))
        elif args.json:
            print(to_json(info))
        else:
            print_tree(info, color=color)
    return rv


if __name__ == "__main__":
    sys.exit(main())
